"""
Reply composition: outcome of a dialogue step -> LINE messages.

Text is chosen from templates.messages; commands outside the wizard also
carry the Flex menu so the user can continue with buttons.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from models.conversation import ConversationPhase
from state_machine.outcomes import Outcome
from templates import messages

logger = logging.getLogger(__name__)

DEFAULT_MENU_PATH = Path(__file__).resolve().parent.parent / "templates" / "flex" / "menu.json"

# Prompt for the field the wizard is waiting for
_FIELD_PROMPTS = {
    ConversationPhase.AWAITING_EXERCISE: messages.message_ask_exercise,
    ConversationPhase.AWAITING_WEIGHT: messages.message_ask_weight,
    ConversationPhase.AWAITING_REPS: messages.message_ask_reps,
}


@dataclass(frozen=True)
class Reply:
    text: str
    include_menu: bool = True


class ReplyComposer:
    """Builds replies and serializes them to LINE message objects."""

    def __init__(self, menu_path: Optional[Path] = None, min_exercise_id_length: int = 4):
        self.menu_path = Path(menu_path) if menu_path else DEFAULT_MENU_PATH
        self.min_exercise_id_length = min_exercise_id_length
        self._menu: Optional[Dict[str, Any]] = None

    def compose(self, outcome: Outcome, phase: ConversationPhase = ConversationPhase.IDLE) -> Reply:
        """
        Picks the reply for an outcome.

        Args:
            outcome: Final outcome of the step
            phase: Phase after the step, used to re-issue the pending prompt
        """
        if outcome == Outcome.WIZARD_STARTED:
            return Reply(messages.message_ask_exercise, include_menu=False)
        if outcome == Outcome.EXERCISE_ACCEPTED:
            return Reply(messages.message_ask_weight, include_menu=False)
        if outcome == Outcome.WEIGHT_ACCEPTED:
            return Reply(messages.message_ask_reps, include_menu=False)
        if outcome == Outcome.INVALID_EXERCISE:
            return Reply(
                messages.invalid_exercise_message(self.min_exercise_id_length),
                include_menu=False,
            )
        if outcome == Outcome.UNKNOWN_EXERCISE:
            return Reply(messages.unknown_exercise_message(), include_menu=False)
        if outcome == Outcome.INVALID_WEIGHT:
            return Reply(messages.invalid_weight_message(), include_menu=False)
        if outcome == Outcome.INVALID_REPS:
            return Reply(messages.invalid_reps_message(), include_menu=False)

        if outcome == Outcome.UNKNOWN_INPUT:
            prompt = _FIELD_PROMPTS.get(phase)
            if prompt:
                return Reply(messages.field_hint(prompt), include_menu=False)
            return Reply(messages.unknown_command_message())
        if outcome == Outcome.FINISH_ENTRY_FIRST:
            prompt = _FIELD_PROMPTS.get(phase, "")
            text = messages.message_finish_entry_first
            return Reply(f"{text}\n{prompt}" if prompt else text, include_menu=False)

        texts = {
            Outcome.SET_RECORDED: messages.message_set_recorded,
            Outcome.SET_FAILED: messages.message_set_failed,
            Outcome.CANCELLED: messages.message_cancelled,
            Outcome.NOTHING_TO_CANCEL: messages.message_nothing_to_cancel,
            Outcome.START_FIRST: messages.message_start_first,
            Outcome.WORKOUT_STARTED: messages.message_workout_started,
            Outcome.WORKOUT_ENDED: messages.message_workout_ended,
            Outcome.NOTHING_TO_END: messages.message_nothing_to_end,
            Outcome.REGISTERED: messages.welcome_message(),
            Outcome.REGISTRATION_FAILED: messages.message_registration_failed,
        }
        return Reply(texts.get(outcome, messages.message_generic_error))

    def load_menu(self) -> Optional[Dict[str, Any]]:
        """Loads and caches the Flex menu. Returns None when unavailable."""
        if self._menu is not None:
            return self._menu
        try:
            menu = json.loads(self.menu_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Could not load Flex menu from {self.menu_path}: {e}")
            return None
        if not isinstance(menu, dict) or menu.get("type") != "flex":
            logger.warning(f"⚠️ Flex menu at {self.menu_path} is not a flex message")
            return None
        self._menu = menu
        return menu

    def to_line_messages(self, reply: Reply) -> List[Dict[str, Any]]:
        """
        Serializes a reply for the LINE reply API.

        A text message, followed by the menu when requested. If the menu
        cannot be loaded the reply degrades to text only, with a note.
        """
        if not reply.include_menu:
            return [{"type": "text", "text": reply.text}]

        menu = self.load_menu()
        if menu is None:
            return [{
                "type": "text",
                "text": f"{reply.text}\n{messages.message_menu_unavailable}",
            }]
        return [{"type": "text", "text": reply.text}, menu]
