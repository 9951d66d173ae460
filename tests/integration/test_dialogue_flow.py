"""
Integration tests for the dialogue orchestrator.

Drive full conversations through DialogueOrchestrator with the in-memory
state backend and fake domain services, checking replies, the stored
wizard state and the domain calls together.
"""

import pytest

from infrastructure.logging import clear_request_context, get_request_context, set_request_context
from models.conversation import ConversationPhase
from models.events import EventType, InboundEvent
from state_machine import Outcome
from templates import messages

USER = "U1234567890abcdef"
INTERNAL_USER = f"user-{USER}"
CONV_KEY = f"conv:{USER}"

pytestmark = pytest.mark.integration


async def send(orchestrator, event):
    results = await orchestrator.handle_events([event])
    assert len(results) == 1
    return results[0]


async def say(orchestrator, event_factory, *texts):
    """Sends text messages in order and returns the last result."""
    result = None
    for text in texts:
        result = await send(orchestrator, event_factory.text(text))
    return result


class TestSetEntry:

    @pytest.mark.asyncio
    async def test_full_entry(self, orchestrator, event_factory, memory_client, workouts, sets):
        started = await say(orchestrator, event_factory, "開始")
        assert started.outcome == Outcome.WORKOUT_STARTED
        assert started.messages[0]["text"] == messages.message_workout_started
        assert started.messages[1]["type"] == "flex"

        prompt = await say(orchestrator, event_factory, "追加")
        assert prompt.outcome == Outcome.WIZARD_STARTED
        assert prompt.messages == [{"type": "text", "text": messages.message_ask_exercise}]

        assert (await say(orchestrator, event_factory, "ex-123")).outcome == Outcome.EXERCISE_ACCEPTED
        assert (await say(orchestrator, event_factory, "60")).outcome == Outcome.WEIGHT_ACCEPTED
        done = await say(orchestrator, event_factory, "8")

        assert done.outcome == Outcome.SET_RECORDED
        assert done.messages[0]["text"] == messages.message_set_recorded
        assert workouts.open_ids() == ["w-1"]
        assert sets.calls == [{
            "user_id": INTERNAL_USER,
            "workout_id": "w-1",
            "exercise_id": "ex-123",
            "reps": 8,
            "weight_kg": 60.0,
        }]
        assert CONV_KEY not in memory_client

    @pytest.mark.asyncio
    async def test_buttons_drive_the_same_flow(self, orchestrator, event_factory, sets):
        await send(orchestrator, event_factory.postback("action=start"))
        await send(orchestrator, event_factory.postback("action=add"))
        await say(orchestrator, event_factory, "bench-press", "62.5", "5")

        assert sets.calls[0]["exercise_id"] == "bench-press"
        assert sets.calls[0]["weight_kg"] == 62.5
        assert sets.calls[0]["reps"] == 5

    @pytest.mark.asyncio
    async def test_wizard_state_is_persisted(
        self, orchestrator, event_factory, conversation_store, workouts
    ):
        workouts.add_open_workout(INTERNAL_USER)
        await say(orchestrator, event_factory, "追加", "ex-123")

        state, found = await conversation_store.get(USER)

        assert found
        assert state.phase == ConversationPhase.AWAITING_WEIGHT
        assert state.workout_id == "w-1"
        assert state.pending.exercise_id == "ex-123"

    @pytest.mark.asyncio
    async def test_add_without_workout(self, orchestrator, event_factory, memory_client, workouts):
        result = await say(orchestrator, event_factory, "追加")

        assert result.outcome == Outcome.START_FIRST
        assert result.messages[0]["text"] == messages.message_start_first
        assert workouts.mutations == []
        assert CONV_KEY not in memory_client

    @pytest.mark.asyncio
    async def test_add_ignores_workouts_started_elsewhere(self, orchestrator, event_factory, workouts):
        workouts.add_open_workout(INTERNAL_USER, from_line=False)

        result = await say(orchestrator, event_factory, "追加")

        assert result.outcome == Outcome.START_FIRST

    @pytest.mark.asyncio
    async def test_invalid_input_then_retry(
        self, orchestrator, event_factory, conversation_store, workouts, sets
    ):
        workouts.add_open_workout(INTERNAL_USER)
        await say(orchestrator, event_factory, "追加", "ex-123")

        bad = await say(orchestrator, event_factory, "heavy")
        assert bad.outcome == Outcome.INVALID_WEIGHT
        assert bad.messages == [{"type": "text", "text": messages.invalid_weight_message()}]
        state, _ = await conversation_store.get(USER)
        assert state.phase == ConversationPhase.AWAITING_WEIGHT
        assert state.pending.exercise_id == "ex-123"

        await say(orchestrator, event_factory, "70", "10")
        assert sets.calls[0]["weight_kg"] == 70.0

    @pytest.mark.asyncio
    async def test_unknown_exercise(self, orchestrator, event_factory, conversation_store, workouts, exercises):
        workouts.add_open_workout(INTERNAL_USER)
        await say(orchestrator, event_factory, "追加")

        result = await say(orchestrator, event_factory, "ex-999")

        assert result.outcome == Outcome.UNKNOWN_EXERCISE
        assert exercises.calls == ["ex-999"]
        state, _ = await conversation_store.get(USER)
        assert state.phase == ConversationPhase.AWAITING_EXERCISE

    @pytest.mark.asyncio
    async def test_commit_failure_clears_wizard(
        self, orchestrator, event_factory, memory_client, workouts, sets
    ):
        workouts.add_open_workout(INTERNAL_USER)
        sets.fail = True

        result = await say(orchestrator, event_factory, "追加", "ex-123", "60", "8")

        assert result.outcome == Outcome.SET_FAILED
        assert result.messages[0]["text"] == messages.message_set_failed
        assert CONV_KEY not in memory_client

    @pytest.mark.asyncio
    async def test_unexpected_commit_error_clears_wizard(
        self, orchestrator, event_factory, memory_client, workouts, sets
    ):
        workouts.add_open_workout(INTERNAL_USER)

        async def broken_add_set(*args, **kwargs):
            raise RuntimeError("connection reset")

        sets.add_set = broken_add_set

        result = await say(orchestrator, event_factory, "追加", "ex-123", "60", "8")

        assert result.outcome == Outcome.SET_FAILED
        assert CONV_KEY not in memory_client

        # Resending the reps is not a field any more
        again = await say(orchestrator, event_factory, "8")
        assert again.outcome == Outcome.UNKNOWN_INPUT

    @pytest.mark.asyncio
    async def test_start_rejected_during_entry(self, orchestrator, event_factory, conversation_store, workouts):
        workouts.add_open_workout(INTERNAL_USER)
        await say(orchestrator, event_factory, "追加", "ex-123")

        result = await say(orchestrator, event_factory, "開始")

        assert result.outcome == Outcome.FINISH_ENTRY_FIRST
        assert workouts.mutations == []
        state, _ = await conversation_store.get(USER)
        assert state.phase == ConversationPhase.AWAITING_WEIGHT

    @pytest.mark.asyncio
    async def test_corrupt_state_recovers(self, orchestrator, event_factory, memory_client, workouts):
        workouts.add_open_workout(INTERNAL_USER)
        await memory_client.set(CONV_KEY, "not-json", expire=60)

        result = await say(orchestrator, event_factory, "追加")

        assert result.outcome == Outcome.WIZARD_STARTED


class TestCancel:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("inputs", [[], ["ex-123"], ["ex-123", "60"]])
    async def test_cancel_from_each_phase(
        self, orchestrator, event_factory, memory_client, workouts, sets, inputs
    ):
        workouts.add_open_workout(INTERNAL_USER)
        await say(orchestrator, event_factory, "追加", *inputs)

        result = await say(orchestrator, event_factory, "キャンセル")

        assert result.outcome == Outcome.CANCELLED
        assert result.messages[0]["text"] == messages.message_cancelled
        assert CONV_KEY not in memory_client
        assert sets.calls == []

    @pytest.mark.asyncio
    async def test_cancel_twice(self, orchestrator, event_factory, workouts):
        workouts.add_open_workout(INTERNAL_USER)
        await say(orchestrator, event_factory, "追加")

        first = await say(orchestrator, event_factory, "キャンセル")
        second = await send(orchestrator, event_factory.postback("action=cancel"))

        assert first.outcome == Outcome.CANCELLED
        assert second.outcome == Outcome.NOTHING_TO_CANCEL


class TestEndWorkout:

    @pytest.mark.asyncio
    async def test_end_started_workout(self, orchestrator, event_factory, active_workouts, workouts):
        await say(orchestrator, event_factory, "開始")
        assert await active_workouts.get(INTERNAL_USER) == "w-1"

        result = await say(orchestrator, event_factory, "終了")

        assert result.outcome == Outcome.WORKOUT_ENDED
        assert workouts.open_ids() == []
        assert await active_workouts.get(INTERNAL_USER) is None

    @pytest.mark.asyncio
    async def test_end_falls_back_to_latest_open(self, orchestrator, event_factory, workouts):
        workout_id = workouts.add_open_workout(INTERNAL_USER)

        result = await say(orchestrator, event_factory, "終了")

        assert result.outcome == Outcome.WORKOUT_ENDED
        assert workouts.workouts[workout_id]["ended_at"] is not None

    @pytest.mark.asyncio
    async def test_stale_marker_falls_back(self, orchestrator, event_factory, active_workouts, workouts):
        stale = workouts.add_open_workout(INTERNAL_USER)
        workouts.workouts[stale]["ended_at"] = "2024-04-30T10:00:00+00:00"
        current = workouts.add_open_workout(INTERNAL_USER)
        await active_workouts.remember(INTERNAL_USER, stale)

        result = await say(orchestrator, event_factory, "終了")

        assert result.outcome == Outcome.WORKOUT_ENDED
        assert workouts.workouts[current]["ended_at"] is not None
        assert await active_workouts.get(INTERNAL_USER) is None

    @pytest.mark.asyncio
    async def test_nothing_to_end(self, orchestrator, event_factory, workouts):
        result = await say(orchestrator, event_factory, "終了")

        assert result.outcome == Outcome.NOTHING_TO_END
        assert result.messages[0]["text"] == messages.message_nothing_to_end
        assert workouts.mutations == []

    @pytest.mark.asyncio
    async def test_start_failure(self, orchestrator, event_factory, memory_client, workouts):
        workouts.fail_create = True

        result = await say(orchestrator, event_factory, "開始")

        assert result.outcome == Outcome.DOMAIN_FAILURE
        assert result.messages[0]["text"] == messages.message_generic_error
        assert CONV_KEY not in memory_client


class TestDelivery:

    @pytest.mark.asyncio
    async def test_follow_registers(self, orchestrator, event_factory, identity):
        result = await send(orchestrator, event_factory.follow())

        assert result.outcome == Outcome.REGISTERED
        assert result.messages[0]["text"] == messages.welcome_message()
        assert identity.calls == [USER]

    @pytest.mark.asyncio
    async def test_identity_failure(self, orchestrator, event_factory, memory_client, identity, workouts):
        identity.fail = True

        result = await say(orchestrator, event_factory, "開始")

        assert result.outcome == Outcome.REGISTRATION_FAILED
        assert workouts.calls == []
        assert CONV_KEY not in memory_client

    @pytest.mark.asyncio
    async def test_failed_event_does_not_stop_batch(self, orchestrator, event_factory, workouts):
        workouts.add_open_workout(INTERNAL_USER)
        original = workouts.latest_open_workout_id
        calls = []

        async def flaky(user_id, source=None):
            calls.append(user_id)
            if len(calls) == 1:
                raise RuntimeError("unexpected")
            return await original(user_id, source=source)

        workouts.latest_open_workout_id = flaky

        results = await orchestrator.handle_events([
            event_factory.text("追加", reply_token="rt-1"),
            event_factory.text("追加", reply_token="rt-2"),
        ])

        assert [r.outcome for r in results] == [Outcome.INTERNAL_ERROR, Outcome.WIZARD_STARTED]
        assert results[0].messages[0]["text"] == messages.message_generic_error

    @pytest.mark.asyncio
    async def test_users_are_independent(self, orchestrator, event_factory, conversation_store, workouts):
        workouts.add_open_workout(INTERNAL_USER)

        await orchestrator.handle_events([
            event_factory.text("追加"),
            event_factory.text("追加", user_id="U-other"),
        ])

        mine, _ = await conversation_store.get(USER)
        theirs, found = await conversation_store.get("U-other")
        assert mine.phase == ConversationPhase.AWAITING_EXERCISE
        assert not found

    @pytest.mark.asyncio
    async def test_event_log_context_is_per_event(self, orchestrator, identity):
        seen = []
        original = identity.resolve_user

        async def recording_resolve(external_user_id):
            seen.append(get_request_context())
            return await original(external_user_id)

        identity.resolve_user = recording_resolve
        set_request_context(path="/webhook/line")

        await orchestrator.handle_events([
            InboundEvent(type=EventType.MESSAGE, external_user_id=USER, text="x", webhook_event_id="ev-1"),
            InboundEvent(type=EventType.MESSAGE, external_user_id=USER, text="y"),
        ])
        clear_request_context()

        assert seen[0]["webhook_event_id"] == "ev-1"
        assert "webhook_event_id" not in seen[1]
        assert seen[1]["path"] == "/webhook/line"
