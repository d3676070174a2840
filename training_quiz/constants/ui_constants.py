"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "Training Center"
DEFAULT_USER_ID: str = "user1"

RESOURCE_LIST_TITLE: str = "Resources"
OVERALL_PROGRESS_TEMPLATE: str = "{completed} of {total} resources completed ({percent:.0f}%)"
COMPLETED_MARK: str = "✓"
CERTIFICATE_MARK: str = "\U0001F3C5"

QUESTION_HEADER_TEMPLATE: str = "Question {number} of {total}"
TIME_REMAINING_TEMPLATE: str = "{minutes}:{seconds:02d} remaining"
TIME_EXPIRED_TEXT: str = "Time is up"

BACK_BUTTON: str = "Back"
NEXT_BUTTON: str = "Next"
SUBMIT_BUTTON: str = "Submit"
RETAKE_BUTTON: str = "Retake Quiz"

NOT_A_QUIZ_MESSAGE: str = "This resource has no assessment. Select a quiz to begin."
NO_QUESTIONS_MESSAGE: str = "This quiz has no questions."
RESULT_HEADER: str = "Quiz Complete!"
RESULT_TEMPLATE: str = "You scored {correct}/{total} ({score:.0f}%)."
PASSED_MESSAGE: str = "Congratulations! You passed the quiz."
FAILED_MESSAGE: str = "Keep studying and try again."
CERTIFICATE_UNLOCKED_TEMPLATE: str = "Module '{module}' complete: your certificate is now available."
