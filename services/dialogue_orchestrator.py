"""
Dialogue orchestrator: drives one LINE event end to end.

For every event it resolves the user, loads the conversation state, asks
the command resolver for the intent, runs the state machine, executes the
requested domain side effect, persists (or clears) the state and composes
the reply. The webhook layer only parses the delivery and sends replies.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from contracts import (
    ConversationStore,
    ExerciseLookup,
    IdentityResolver,
    SetService,
    WorkoutService,
)
from core.exceptions import (
    DomainServiceError,
    IdentityResolutionError,
    StoreError,
    WorkoutNotFoundError,
)
from core.locks import KeyedLock, NullLock
from flows.command_resolver import resolve_intent
from flows.validators import validate_exercise_id
from infrastructure.logging.structured_logger import (
    clear_request_context,
    get_request_context,
    set_request_context,
)
from infrastructure.persistence.active_workout_store import ActiveWorkoutStore
from models.conversation import ConversationPhase, ConversationState
from models.events import EventType, InboundEvent
from models.intents import Intent, IntentType
from services.reply_composer import Reply, ReplyComposer
from state_machine import (
    AddSet,
    CreateWorkout,
    EndWorkout,
    Outcome,
    StateMachineEngine,
    TransitionFacts,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DialogueResult:
    """What happened for one event and what to send back."""

    event: InboundEvent
    outcome: Outcome
    reply: Reply
    messages: List[Dict[str, Any]] = field(default_factory=list)


class DialogueOrchestrator:
    """
    Per-event controller for the set-entry dialogue.

    Usage:
        orchestrator = DialogueOrchestrator(
            store=conversation_store,
            active_workouts=active_workout_store,
            identity_resolver=resolver,
            workouts=workout_repository,
            sets=set_repository,
            exercises=exercise_repository,
        )
        results = await orchestrator.handle_events(events)
    """

    def __init__(
        self,
        store: ConversationStore,
        active_workouts: ActiveWorkoutStore,
        identity_resolver: IdentityResolver,
        workouts: WorkoutService,
        sets: SetService,
        exercises: ExerciseLookup,
        engine: Optional[StateMachineEngine] = None,
        composer: Optional[ReplyComposer] = None,
        workout_source: str = "line",
        verify_exercise_exists: bool = True,
        serialize_per_user: bool = True,
        clock: Callable[[], datetime] = _utcnow,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            store: ConversationStore for the wizard state
            active_workouts: ActiveWorkoutStore remembering started workouts
            identity_resolver: IdentityResolver for LINE user ids
            workouts: WorkoutService
            sets: SetService
            exercises: ExerciseLookup
            engine: State machine (default rules when omitted)
            composer: Reply composer
            workout_source: Channel filter for the open-workout lookups
            verify_exercise_exists: Check exercise ids against the catalogue
            serialize_per_user: Run each user's events under a per-key lock
            clock: Source of started_at / ended_at timestamps
            logger: Logger instance
        """
        self.store = store
        self.active_workouts = active_workouts
        self.identity_resolver = identity_resolver
        self.workouts = workouts
        self.sets = sets
        self.exercises = exercises
        self.engine = engine or StateMachineEngine()
        self.composer = composer or ReplyComposer(
            min_exercise_id_length=self.engine.rules.min_exercise_id_length
        )
        self.workout_source = workout_source
        self.verify_exercise_exists = verify_exercise_exists
        self.locks = KeyedLock() if serialize_per_user else NullLock()
        self._clock = clock
        self.logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def handle_events(self, events: List[InboundEvent]) -> List[DialogueResult]:
        """
        Handles the events of one webhook delivery in order.

        A failure in one event is answered with a generic error reply and
        never stops the remaining events.
        """
        results = []
        # Request-level fields (method, path) survive; event fields do not
        base_context = get_request_context()
        for event in events:
            clear_request_context()
            set_request_context(**base_context)
            try:
                results.append(await self.handle_event(event))
            except Exception:
                self.logger.exception(
                    "❌ Unhandled error processing event",
                    extra={
                        "line_user_id": event.external_user_id,
                        "event_type": event.type.value,
                        "webhook_event_id": event.webhook_event_id,
                    },
                )
                results.append(self._result(event, Outcome.INTERNAL_ERROR))
        return results

    async def handle_event(self, event: InboundEvent) -> DialogueResult:
        set_request_context(
            line_user_id=event.external_user_id,
            webhook_event_id=event.webhook_event_id,
        )
        if event.is_redelivery:
            self.logger.info(
                "🔁 Redelivered event",
                extra={"webhook_event_id": event.webhook_event_id},
            )

        if event.type == EventType.FOLLOW:
            return await self._handle_follow(event)

        async with self.locks.hold(event.external_user_id):
            return await self._handle_command(event)

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    async def _handle_follow(self, event: InboundEvent) -> DialogueResult:
        try:
            await self.identity_resolver.resolve_user(event.external_user_id)
        except IdentityResolutionError as e:
            self.logger.error(f"❌ Registration failed: {e}")
            return self._result(event, Outcome.REGISTRATION_FAILED)
        self.logger.info(f"👋 New follower registered: {event.external_user_id}")
        return self._result(event, Outcome.REGISTERED)

    async def _handle_command(self, event: InboundEvent) -> DialogueResult:
        external_id = event.external_user_id

        try:
            user_id = await self.identity_resolver.resolve_user(external_id)
        except IdentityResolutionError as e:
            self.logger.error(f"❌ Could not resolve user: {e}")
            return self._result(event, Outcome.REGISTRATION_FAILED)

        loaded, found = await self.store.get(external_id)
        state = loaded if found and loaded is not None else ConversationState.idle()

        intent = resolve_intent(event, state.phase)
        self.logger.info(
            f"📱 LINE [{external_id}] phase={state.phase.value} intent={intent.type.value}",
            extra={"text_prefix": (event.text or event.postback_data or "")[:20]},
        )

        try:
            facts = await self._gather_facts(user_id, state, intent)
        except DomainServiceError as e:
            self.logger.error(f"❌ Lookup failed before transition: {e}")
            return self._result(event, Outcome.DOMAIN_FAILURE, state.phase)

        transition = self.engine.step(state, intent, facts)
        outcome = transition.outcome
        next_state = transition.state

        effect = transition.side_effect
        if isinstance(effect, AddSet):
            outcome = await self._commit(user_id, effect)
            next_state = ConversationState.idle()
        elif isinstance(effect, CreateWorkout):
            outcome = await self._start_workout(user_id)
        elif isinstance(effect, EndWorkout):
            outcome = await self._end_workout(user_id)

        await self._persist(external_id, found, state, next_state)

        self.logger.info(
            f"✅ {external_id}: {state.phase.value} -> {next_state.phase.value}",
            extra={"outcome": outcome.value},
        )
        return self._result(event, outcome, next_state.phase)

    async def _gather_facts(
        self, user_id: str, state: ConversationState, intent: Intent
    ) -> TransitionFacts:
        """
        Runs the lookups the engine needs for this intent.

        Raises:
            DomainServiceError: If a lookup fails
        """
        if intent.type == IntentType.ADD_ENTRY:
            workout_id = await self.workouts.latest_open_workout_id(
                user_id, source=self.workout_source
            )
            return TransitionFacts(open_workout_id=workout_id)

        if (
            intent.type == IntentType.PROVIDE_FIELD
            and state.phase == ConversationPhase.AWAITING_EXERCISE
            and self.verify_exercise_exists
        ):
            is_valid, exercise_id = validate_exercise_id(
                intent.text or "", self.engine.rules.min_exercise_id_length
            )
            if is_valid:
                known = await self.exercises.exercise_exists(exercise_id)
                return TransitionFacts(exercise_known=known)

        return TransitionFacts()

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    async def _commit(self, user_id: str, effect: AddSet) -> Outcome:
        """Records the set. The wizard is cleared whatever the result."""
        try:
            set_id = await self.sets.add_set(
                user_id,
                effect.workout_id,
                effect.exercise_id,
                effect.reps,
                effect.weight_kg,
            )
        except DomainServiceError as e:
            self.logger.error(
                f"❌ Set commit failed: {e}",
                extra={"workout_id": effect.workout_id, "exercise_id": effect.exercise_id},
            )
            return Outcome.SET_FAILED
        except Exception:
            # The entry is dropped either way; a retry starts from 追加
            self.logger.exception(
                "❌ Unexpected error committing set",
                extra={"workout_id": effect.workout_id, "exercise_id": effect.exercise_id},
            )
            return Outcome.SET_FAILED
        self.logger.info(f"💪 Set {set_id} recorded in workout {effect.workout_id}")
        return Outcome.SET_RECORDED

    async def _start_workout(self, user_id: str) -> Outcome:
        try:
            workout_id = await self.workouts.create_workout(user_id, self._clock())
        except DomainServiceError as e:
            self.logger.error(f"❌ Could not start workout: {e}")
            return Outcome.DOMAIN_FAILURE

        try:
            await self.active_workouts.remember(user_id, workout_id)
        except StoreError as e:
            self.logger.warning(f"⚠️ Active workout marker not saved: {e}")
        return Outcome.WORKOUT_STARTED

    async def _end_workout(self, user_id: str) -> Outcome:
        """
        Ends the user's workout.

        Tries the remembered workout first, then the latest open workout
        created through this channel. No open workout is not an error.
        """
        remembered = await self.active_workouts.get(user_id)
        if remembered:
            try:
                await self.workouts.end_workout(remembered, user_id, self._clock())
                await self._forget_active(user_id)
                return Outcome.WORKOUT_ENDED
            except DomainServiceError as e:
                self.logger.info(
                    f"Remembered workout {remembered} not ended, using fallback: {e}"
                )

        try:
            workout_id = await self.workouts.latest_open_workout_id(
                user_id, source=self.workout_source
            )
            if not workout_id:
                if remembered:
                    await self._forget_active(user_id)
                return Outcome.NOTHING_TO_END
            await self.workouts.end_workout(workout_id, user_id, self._clock())
        except WorkoutNotFoundError:
            return Outcome.NOTHING_TO_END
        except DomainServiceError as e:
            self.logger.error(f"❌ Could not end workout: {e}")
            return Outcome.DOMAIN_FAILURE

        await self._forget_active(user_id)
        return Outcome.WORKOUT_ENDED

    async def _forget_active(self, user_id: str) -> None:
        try:
            await self.active_workouts.forget(user_id)
        except StoreError as e:
            self.logger.warning(f"⚠️ Active workout marker not cleared: {e}")

    # ------------------------------------------------------------------
    # Persistence and replies
    # ------------------------------------------------------------------

    async def _persist(
        self,
        external_id: str,
        found: bool,
        previous: ConversationState,
        next_state: ConversationState,
    ) -> None:
        """
        Saves the next state, or deletes the entry when back to idle.

        Store failures are logged only: the next delivery recovers through
        the idle default or the saved entry's TTL.
        """
        try:
            if next_state.is_idle():
                if found:
                    await self.store.delete(external_id)
            elif next_state is not previous:
                await self.store.set(external_id, next_state)
        except StoreError as e:
            self.logger.error(f"❌ Conversation state not persisted: {e}")

    def _result(
        self,
        event: InboundEvent,
        outcome: Outcome,
        phase: ConversationPhase = ConversationPhase.IDLE,
    ) -> DialogueResult:
        reply = self.composer.compose(outcome, phase)
        return DialogueResult(
            event=event,
            outcome=outcome,
            reply=reply,
            messages=self.composer.to_line_messages(reply),
        )
