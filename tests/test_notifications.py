from __future__ import annotations

import pytest

from jmsfleet.state.notifications import NotificationLevel, Notifier


class _Clock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> _Clock:
    return _Clock()


def test_success_is_visible_until_ttl(clock: _Clock) -> None:
    notifier = Notifier(ttl=4.0, clock=clock)
    notifier.success("Aluguel salvo com sucesso!")

    clock.now += 3.999
    current = notifier.current
    assert current is not None
    assert current.level is NotificationLevel.SUCCESS
    assert current.message == "Aluguel salvo com sucesso!"

    clock.now = 104.0
    assert notifier.current is None


def test_failure_stays_after_ttl(clock: _Clock) -> None:
    notifier = Notifier(ttl=4.0, clock=clock)
    notifier.failure("Erro ao salvar custo.")

    clock.now += 3600
    current = notifier.current
    assert current is not None
    assert current.is_failure
    assert current.message == "Erro ao salvar custo."


def test_dismiss_clears_any_notification(clock: _Clock) -> None:
    notifier = Notifier(ttl=4.0, clock=clock)

    notifier.failure("Erro ao excluir usuário.")
    notifier.dismiss()
    assert notifier.current is None

    notifier.success("Usuário excluído.")
    notifier.dismiss()
    assert notifier.current is None


def test_new_notification_replaces_the_previous_one(clock: _Clock) -> None:
    notifier = Notifier(ttl=4.0, clock=clock)

    notifier.failure("Erro ao carregar frota.")
    notifier.success("Frota atualizada.")

    current = notifier.current
    assert current is not None
    assert not current.is_failure
    clock.now += 4.0
    assert notifier.current is None
