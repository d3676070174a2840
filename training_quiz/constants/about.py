"""Static metadata describing the training quiz console."""

APP_NAME = "Training Quiz"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "Training Quiz runs the timed assessments of the sales training modules. "
    "Answers are saved as you go, so you can leave a quiz and resume it later. "
    "Passing a quiz marks the resource complete and counts towards the module certificate."
)
