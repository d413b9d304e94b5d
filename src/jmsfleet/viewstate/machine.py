"""Per-screen list/add/edit controller.

A :class:`ScreenController` owns which view of a CRUD screen is shown,
the draft form, and the entity being edited. Saving validates the draft
locally, then awaits the sync operation; the store is the only place the
saved entity lands.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from jmsfleet.exceptions import JmsStateError, JmsValidationError
from jmsfleet.mapping.normalize import coerce_id
from jmsfleet.state.events import EntityKind
from jmsfleet.viewstate.forms import (
    ChecklistForm,
    CostForm,
    FleetForm,
    JmsForm,
    LocationForm,
    RentalForm,
    UserForm,
    validate_form,
)

if TYPE_CHECKING:
    from jmsfleet.client import JmsClient

_logger = logging.getLogger(__name__)

_FormT = TypeVar("_FormT", bound=JmsForm)

SaveOperation = Callable[[Any], Awaitable[Any]]
DeleteOperation = Callable[[Any], Awaitable[bool]]

GENERIC_FAILURE_MESSAGE = "Não foi possível salvar. Tente novamente."

FORMS: dict[EntityKind, type[JmsForm]] = {
    EntityKind.USERS: UserForm,
    EntityKind.RENTALS: RentalForm,
    EntityKind.COSTS: CostForm,
    EntityKind.LOCATIONS: LocationForm,
    EntityKind.FLEET: FleetForm,
    EntityKind.CHECKLISTS: ChecklistForm,
}


class Mode(StrEnum):
    LIST = "list"
    ADD = "add"
    EDIT = "edit"


class ScreenController(Generic[_FormT]):
    """List/add/edit state of one CRUD screen.

    Transitions::

        list --new()--> add --save() ok / cancel()--> list
        list --edit(e)--> edit --save() ok / cancel()--> list

    Any other transition raises :class:`JmsStateError`. After
    :meth:`dispose`, completions of in-flight saves no longer touch the
    controller.
    """

    def __init__(
        self,
        form_cls: type[_FormT],
        *,
        create: SaveOperation,
        update: SaveOperation,
        delete: DeleteOperation | None = None,
        failure_message: Callable[[], str | None] | None = None,
    ) -> None:
        self._form_cls = form_cls
        self._create = create
        self._update = update
        self._delete = delete
        self._failure_message = failure_message
        self._mode = Mode.LIST
        self._form: _FormT | None = None
        self._editing: Any = None
        self._pending_delete: int | str | None = None
        self._saving = False
        self._disposed = False
        self.error: str | None = None
        self.field_errors: dict[str, str] = {}

    @classmethod
    def for_kind(cls, client: JmsClient, kind: EntityKind) -> ScreenController[Any]:
        """Controller wired to the client's sync operations for *kind*."""

        def _failure() -> str | None:
            current = client.notifier.current
            return current.message if current is not None and current.is_failure else None

        return cls(
            FORMS[kind],
            create=lambda entity: client.create(kind, entity),
            update=lambda entity: client.update(kind, entity),
            delete=lambda entity_id: client.delete(kind, entity_id),
            failure_message=_failure,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def form(self) -> _FormT | None:
        return self._form

    @property
    def editing(self) -> Any:
        """Entity under edit (``None`` outside ``edit`` mode)."""
        return self._editing

    @property
    def saving(self) -> bool:
        return self._saving

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def pending_delete(self) -> int | str | None:
        return self._pending_delete

    def _require_alive(self) -> None:
        if self._disposed:
            raise JmsStateError("Screen controller has been disposed")

    def _clear_errors(self) -> None:
        self.error = None
        self.field_errors = {}

    def _to_list(self) -> None:
        self._mode = Mode.LIST
        self._form = None
        self._editing = None
        self._clear_errors()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def new(self) -> _FormT:
        self._require_alive()
        if self._mode is not Mode.LIST:
            raise JmsStateError(f"Cannot open a new form while in {self._mode} mode")
        # The blank draft is not validated; required fields are checked on save.
        draft = self._form_cls.model_construct()
        self._mode = Mode.ADD
        self._form = draft
        self._editing = None
        self._clear_errors()
        return self._form

    def edit(self, entity: Any) -> _FormT:
        self._require_alive()
        if self._mode is not Mode.LIST:
            raise JmsStateError(f"Cannot edit while in {self._mode} mode")
        draft = self._form_cls.from_entity(entity)
        self._mode = Mode.EDIT
        self._form = draft
        self._editing = entity
        self._clear_errors()
        return self._form

    def cancel(self) -> None:
        self._require_alive()
        if self._mode is Mode.LIST:
            raise JmsStateError("Nothing to cancel in list mode")
        self._to_list()

    def update_form(self, **changes: Any) -> _FormT:
        """Replace fields of the draft (no validation until save)."""
        if self._form is None:
            raise JmsStateError("No form is open")
        self._form = self._form.model_copy(update=changes)
        return self._form

    async def save(self, data: Mapping[str, Any] | JmsForm | None = None) -> Any:
        """Validate *data* (or the current draft) and persist it.

        Returns the saved entity, or ``None`` when validation or the sync
        operation failed; in both cases the form stays open with
        :attr:`error` set.
        """
        self._require_alive()
        if self._mode is Mode.LIST:
            raise JmsStateError("No form is open")
        if self._saving:
            raise JmsStateError("A save is already in progress")

        source = data if data is not None else self._form
        if source is None:
            raise JmsStateError("No form is open")
        if isinstance(source, JmsForm):
            source = source.model_dump()
        if self._mode is Mode.EDIT and self._editing is not None:
            source = {**source, "id": getattr(self._editing, "id", None)}

        try:
            form = validate_form(self._form_cls, source)
        except JmsValidationError as exc:
            self.error = str(exc)
            self.field_errors = dict(exc.field_errors)
            return None

        self._form = form
        self._clear_errors()
        operation = self._update if self._mode is Mode.EDIT else self._create
        self._saving = True
        try:
            result = await operation(form.to_entity())  # type: ignore[attr-defined]
        except JmsValidationError as exc:
            if not self._disposed:
                self.error = str(exc)
                self.field_errors = dict(exc.field_errors)
            return None
        finally:
            self._saving = False

        if self._disposed:
            _logger.debug("Save of %s finished after dispose", self._form_cls.__name__)
            return result
        if result is None:
            message = self._failure_message() if self._failure_message is not None else None
            self.error = message or GENERIC_FAILURE_MESSAGE
            return None
        self._to_list()
        return result

    # ------------------------------------------------------------------
    # Confirm-then-delete
    # ------------------------------------------------------------------

    def request_delete(self, entity_id: Any) -> None:
        self._require_alive()
        if self._mode is not Mode.LIST:
            raise JmsStateError("Delete is only available from the list")
        self._pending_delete = coerce_id(entity_id)

    def cancel_delete(self) -> None:
        self._pending_delete = None

    async def confirm_delete(self) -> bool:
        self._require_alive()
        if self._pending_delete is None:
            raise JmsStateError("No delete awaiting confirmation")
        if self._delete is None:
            raise JmsStateError("This screen has no delete operation")
        entity_id = self._pending_delete
        deleted = await self._delete(entity_id)
        if not self._disposed:
            self._pending_delete = None
        return deleted

    def dispose(self) -> None:
        """Detach the controller; later completions are ignored."""
        self._disposed = True
