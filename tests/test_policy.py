import logging

import pytest

from src.policy import ConversationPolicyEngine, OutcomeKind, PolicyOutcome

ON_TOPIC = "what are your web development prices?"
OFF_TOPIC = "what is the weather like today?"


@pytest.fixture
def engine(ledger):
    return ConversationPolicyEngine(ledger=ledger)


def test_on_topic_message_proceeds(engine):
    assert engine.evaluate("10.0.0.1", ON_TOPIC) == PolicyOutcome.proceed()


def test_off_topic_sequence_warns_then_blocks(engine, ledger):
    outcomes = [engine.evaluate("10.0.0.1", OFF_TOPIC) for _ in range(3)]

    assert outcomes == [
        PolicyOutcome.warn(1),
        PolicyOutcome.warn(2),
        PolicyOutcome.newly_blocked(),
    ]
    assert ledger.is_blocked("10.0.0.1") is True


def test_blocked_client_stays_blocked_whatever_the_content(engine):
    for _ in range(3):
        engine.evaluate("10.0.0.1", OFF_TOPIC)

    assert engine.evaluate("10.0.0.1", ON_TOPIC) == PolicyOutcome.blocked()
    assert engine.evaluate("10.0.0.1", OFF_TOPIC) == PolicyOutcome.blocked()


def test_blocked_messages_do_not_touch_counter(engine, ledger):
    for _ in range(3):
        engine.evaluate("10.0.0.1", OFF_TOPIC)
    engine.evaluate("10.0.0.1", OFF_TOPIC)
    assert ledger.off_topic_count("10.0.0.1") == 3


def test_on_topic_message_resets_warnings(engine):
    engine.evaluate("10.0.0.1", OFF_TOPIC)
    engine.evaluate("10.0.0.1", OFF_TOPIC)
    assert engine.evaluate("10.0.0.1", ON_TOPIC) == PolicyOutcome.proceed()
    assert engine.evaluate("10.0.0.1", OFF_TOPIC) == PolicyOutcome.warn(1)


def test_unblock_then_off_topic_warns(engine):
    for _ in range(3):
        engine.evaluate("10.0.0.1", OFF_TOPIC)

    assert engine.unblock("10.0.0.1") is True
    assert engine.evaluate("10.0.0.1", OFF_TOPIC) == PolicyOutcome.warn(1)


def test_unblock_unknown_client(engine, ledger):
    assert engine.unblock("10.0.0.9") is False
    assert ledger.off_topic_count("10.0.0.9") == 0
    assert ledger.is_blocked("10.0.0.9") is False


def test_lapsed_block_is_reevaluated_from_clean_counter(engine, clock):
    for _ in range(3):
        engine.evaluate("10.0.0.1", OFF_TOPIC)
    clock.advance(3601)

    assert engine.evaluate("10.0.0.1", OFF_TOPIC) == PolicyOutcome.warn(1)


def test_clients_are_independent(engine):
    for _ in range(3):
        engine.evaluate("10.0.0.1", OFF_TOPIC)
    assert engine.evaluate("10.0.0.2", OFF_TOPIC) == PolicyOutcome.warn(1)


def test_custom_classifier_and_threshold(ledger):
    engine = ConversationPolicyEngine(ledger=ledger, classify_off_topic=lambda text: True, threshold=5)
    kinds = [engine.evaluate("10.0.0.1", "anything").kind for _ in range(5)]
    assert kinds[:4] == [OutcomeKind.WARN] * 4
    assert kinds[4] == OutcomeKind.NEWLY_BLOCKED


def test_only_warn_and_proceed_reach_backend():
    assert PolicyOutcome.proceed().reaches_backend
    assert PolicyOutcome.warn(1).reaches_backend
    assert not PolicyOutcome.blocked().reaches_backend
    assert not PolicyOutcome.newly_blocked().reaches_backend


def test_blocked_rejection_logs_remaining_time(engine, clock, caplog):
    for _ in range(3):
        engine.evaluate("10.0.0.1", OFF_TOPIC)
    clock.advance(600)

    with caplog.at_level(logging.INFO, logger="src.policy"):
        assert engine.evaluate("10.0.0.1", ON_TOPIC) == PolicyOutcome.blocked()

    assert "3000 sec remaining" in caplog.text
