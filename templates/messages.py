"""Reply texts for the LINE workout bot."""

# ==================== WORKOUT ====================

message_workout_started = "ワークアウトを開始しました！"

message_workout_ended = "ワークアウトを終了しました！"

message_nothing_to_end = (
    "進行中のワークアウトが見つかりません。まずは『開始』してください"
)

message_start_first = "まず「開始」してください"

# ==================== WIZARD ====================

message_ask_exercise = "種目IDを送ってください"

message_ask_weight = "OK! 次は重量(kg)を送ってください（例: 60）"

message_ask_reps = "OK! 次は回数を送ってください（例: 8）"

message_set_recorded = "セットを登録しました！ 続けて『追加』でどうぞ"

message_set_failed = "セット登録に失敗しました…もう一度『追加』からやり直してください"

message_cancelled = "キャンセルしました。『追加』からやり直してください"

message_nothing_to_cancel = "キャンセルする入力はありません"

message_finish_entry_first = (
    "入力中のセットがあります。続けて入力するか『キャンセル』してください"
)

# ==================== ERRORS ====================

message_generic_error = "エラーが発生しました。もう一度お試しください"

message_registration_failed = "ユーザー登録に失敗しました。しばらくしてからもう一度お試しください"

message_menu_unavailable = "(メニューの読み込みに失敗しました)"


def welcome_message() -> str:
    """Welcome shown after the user adds the bot."""
    return "登録しました！「開始」「終了」ボタン（またはメッセージ）でどうぞ💪"


def invalid_exercise_message(min_length: int) -> str:
    """Exercise id rejected by shape."""
    return f"種目IDは{min_length}文字以上で送ってください"


def unknown_exercise_message() -> str:
    return "その種目IDは見つかりません。もう一度送ってください"


def invalid_weight_message() -> str:
    return "重量は0以上の数値で送ってください（例: 60）"


def invalid_reps_message() -> str:
    return "回数は正の整数で送ってください（例: 8）"


def unknown_command_message() -> str:
    """Re-prompt listing the available commands."""
    return "未対応の操作です。「開始」「追加」「終了」「キャンセル」から選んでください"


def field_hint(prompt: str) -> str:
    """Prompt re-issued after unrecognized input during the wizard."""
    return f"『追加』ボタン → 入力を進めてね\n{prompt}"
