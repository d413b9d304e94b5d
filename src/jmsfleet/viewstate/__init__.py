"""View-state machines: screen controllers, forms and the checklist editor."""
