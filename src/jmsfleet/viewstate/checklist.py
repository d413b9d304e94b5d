"""Check-in / check-out sub-status editing for checklists.

Each stage has its own status. Ticking every required conference item of
a stage advances it to ``"Concluído"``; check-out is only derived once it
has left ``"Não Iniciado"``. The derivation only ever advances a status.

An operator can also pick a status directly. Picking anything short of
``"Concluído"`` while every required item is ticked is a manual override:
with ``respect_manual_override=True`` (the default) later item toggles no
longer re-advance that stage until the operator picks ``"Concluído"``
again. ``respect_manual_override=False`` keeps the historical behaviour
where every toggle re-runs the derivation.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from jmsfleet.exceptions import JmsValidationError
from jmsfleet.models import CheckInStatus, CheckOutStatus, ContractItems
from jmsfleet.viewstate.forms import ChecklistForm, validate_form
from jmsfleet.viewstate.machine import ScreenController

_logger = logging.getLogger(__name__)

CHECKIN_REQUIRED: tuple[str, ...] = ("tiem", "fuel_full", "key", "insurance", "trailer_doc", "anchor", "rope")
CHECKOUT_REQUIRED: tuple[str, ...] = (*CHECKIN_REQUIRED, "wash", "freshwater_flush")

ITEM_LABELS: dict[str, str] = {
    "tiem": "Documento (TIEM)",
    "fuel_full": "Tanque Cheio",
    "key": "Chave do Jet Ski",
    "insurance": "Seguro Obrigatório",
    "trailer_doc": "Doc. Carreta Rodoviária",
    "anchor": "Âncora",
    "rope": "Cabo de Atracação",
    "wash": "Lavar Jet Ski",
    "freshwater_flush": "Adoçar Motor",
}

VEST_SIZES: tuple[str, ...] = ("eg", "gg", "g1", "m")


class Stage(StrEnum):
    CHECK_IN = "checkin"
    CHECK_OUT = "checkout"


_ITEMS_FIELD = {Stage.CHECK_IN: "checkin_items", Stage.CHECK_OUT: "checkout_items"}
_STATUS_FIELD = {Stage.CHECK_IN: "status_check_in", Stage.CHECK_OUT: "status_check_out"}
_REQUIRED = {Stage.CHECK_IN: CHECKIN_REQUIRED, Stage.CHECK_OUT: CHECKOUT_REQUIRED}
_STAGE_LABEL = {Stage.CHECK_IN: "Check-in", Stage.CHECK_OUT: "Check-out"}


class ChecklistEditor:
    """Draft checklist with the sub-status watcher.

    Wraps the checklist screen's :class:`ScreenController`; the draft is
    the controller's open form.
    """

    def __init__(self, controller: ScreenController[Any], *, respect_manual_override: bool = True) -> None:
        self._controller = controller
        self.respect_manual_override = respect_manual_override
        self._overridden = {Stage.CHECK_IN: False, Stage.CHECK_OUT: False}
        self.pending_confirmation: list[str] = []

    def open(self, entity: Any = None) -> ChecklistForm:
        """Open a new draft, or the edit form of *entity*."""
        self._overridden = {Stage.CHECK_IN: False, Stage.CHECK_OUT: False}
        self.pending_confirmation = []
        if entity is None:
            return self._controller.new()
        return self._controller.edit(entity)

    @property
    def draft(self) -> ChecklistForm:
        form = self._controller.form
        if not isinstance(form, ChecklistForm):
            raise TypeError("The controller has no checklist form open")
        return form

    def manually_overridden(self, stage: Stage | str) -> bool:
        return self._overridden[Stage(stage)]

    def _items(self, stage: Stage) -> ContractItems:
        return getattr(self.draft, _ITEMS_FIELD[stage])

    def _status(self, stage: Stage) -> Any:
        return getattr(self.draft, _STATUS_FIELD[stage])

    def _complete(self, stage: Stage) -> bool:
        items = self._items(stage)
        return all(getattr(items, name) for name in _REQUIRED[stage])

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def set_field(self, name: str, value: Any) -> ChecklistForm:
        """Change a plain field (client, jet ski, date, observations...)."""
        if name in _ITEMS_FIELD.values() or name in _STATUS_FIELD.values():
            raise ValueError(f"{name} is edited through the item and status methods")
        return self._controller.update_form(**{name: value})

    def toggle_item(self, stage: Stage | str, item: str, value: bool) -> ChecklistForm:
        stage = Stage(stage)
        if item not in ContractItems.model_fields or item == "vests":
            raise ValueError(f"Unknown conference item: {item}")
        items = self._items(stage).model_copy(update={item: bool(value)})
        self._controller.update_form(**{_ITEMS_FIELD[stage]: items})
        self._derive_statuses()
        return self.draft

    def toggle_vest(self, stage: Stage | str, size: str, value: bool) -> ChecklistForm:
        stage = Stage(stage)
        if size not in VEST_SIZES:
            raise ValueError(f"Unknown vest size: {size}")
        items = self._items(stage)
        vests = items.vests.model_copy(update={size: bool(value)})
        self._controller.update_form(**{_ITEMS_FIELD[stage]: items.model_copy(update={"vests": vests})})
        self._derive_statuses()
        return self.draft

    def set_status(self, stage: Stage | str, status: Any) -> ChecklistForm:
        """Operator picks a status directly."""
        stage = Stage(stage)
        status = CheckInStatus(status) if stage is Stage.CHECK_IN else CheckOutStatus(status)
        completed = status.value == CheckInStatus.COMPLETED.value
        self._overridden[stage] = not completed and self._complete(stage)
        return self._controller.update_form(**{_STATUS_FIELD[stage]: status})

    def _derive_statuses(self) -> None:
        changes: dict[str, Any] = {}
        if self._should_advance(Stage.CHECK_IN):
            changes[_STATUS_FIELD[Stage.CHECK_IN]] = CheckInStatus.COMPLETED
        if self._status(Stage.CHECK_OUT) is not CheckOutStatus.NOT_STARTED and self._should_advance(Stage.CHECK_OUT):
            changes[_STATUS_FIELD[Stage.CHECK_OUT]] = CheckOutStatus.COMPLETED
        if changes:
            _logger.debug("Checklist statuses derived: %s", changes)
            self._controller.update_form(**changes)

    def _should_advance(self, stage: Stage) -> bool:
        if self.respect_manual_override and self._overridden[stage]:
            return False
        return self._status(stage).value != CheckInStatus.COMPLETED.value and self._complete(stage)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def missing_items(self) -> list[str]:
        """Unticked required items, labelled by stage."""
        missing = [
            f"({_STAGE_LABEL[Stage.CHECK_IN]}) {ITEM_LABELS[name]}"
            for name in CHECKIN_REQUIRED
            if not getattr(self._items(Stage.CHECK_IN), name)
        ]
        if self._status(Stage.CHECK_OUT) is not CheckOutStatus.NOT_STARTED:
            missing.extend(
                f"({_STAGE_LABEL[Stage.CHECK_OUT]}) {ITEM_LABELS[name]}"
                for name in CHECKOUT_REQUIRED
                if not getattr(self._items(Stage.CHECK_OUT), name)
            )
        return missing

    async def save(self, *, confirm_missing: bool = False) -> Any:
        """Save the draft through the controller.

        With required items still unticked and no *confirm_missing*, the
        save is held back: :attr:`pending_confirmation` lists the missing
        items and ``None`` is returned without calling persistence.
        """
        missing = self.missing_items()
        if missing and not confirm_missing:
            try:
                validate_form(ChecklistForm, self.draft)
            except JmsValidationError:
                # Required fields are reported before missing items.
                return await self._controller.save()
            self.pending_confirmation = missing
            return None
        self.pending_confirmation = []
        return await self._controller.save()
