"""Locator candidates and technique lists for the target pages.

Candidates are ordered from most to least specific; the resolver takes the
first one that yields an interactable element.
"""

from clickflow.models.locator import css, role, text, xpath
from clickflow.models.technique import InteractionTechnique, TechniqueKind

OTP_LENGTH = 6

PLAY_BUTTON = [
    role("button", name="Play Now"),
    role("link", name="Play Now"),
    css("button:has-text('Play Now')"),
    css("a:has-text('Play Now')"),
    xpath(
        "//*[self::button or self::a or @role='button']"
        "[contains(translate(normalize-space(.), 'PLAYNOW', 'playnow'), 'play now')]",
        label="xpath=play-now",
    ),
    text("Play Now"),
]

LOGIN_ENTRY = [
    role("button", name="Log in"),
    role("button", name="Sign in"),
    role("button", name="Sign up"),
    role("link", name="Log in"),
    role("link", name="Sign in"),
    role("link", name="Sign up"),
    text("Log in"),
]

EMAIL_INPUT = [
    css("input[type='email']"),
    css("input[name='email']"),
    css("input[autocomplete='email']"),
    role("textbox", name="email"),
    css("input[placeholder*='mail' i]"),
]

EMAIL_SUBMIT = [
    css("form button[type='submit']"),
    role("button", name="Continue"),
    role("button", name="Next"),
    role("button", name="Send code"),
    role("button", name="Sign in"),
    role("button", name="Log in"),
    role("button", name="Sign up"),
    css("button[type='submit']"),
]

# Per-character fields come before single-field selectors so that a
# six-box widget is not mistaken for its first box.
OTP_SLOTS = [
    css("input[inputmode='numeric'][maxlength='1']"),
    css("input[maxlength='1']"),
    css("input[data-index]"),
    css("input[autocomplete='one-time-code']"),
]

OTP_SUBMIT = [
    role("button", name="Verify"),
    role("button", name="Continue"),
    role("button", name="Confirm"),
    role("button", name="Submit"),
    css("button[type='submit']"),
]

CLICK_TECHNIQUES = [
    InteractionTechnique(kind=TechniqueKind.NATIVE_ACTIVATE),
    InteractionTechnique(
        kind=TechniqueKind.SYNTHETIC_EVENT_DISPATCH,
        events=("pointerdown", "mousedown", "pointerup", "mouseup", "click"),
    ),
    InteractionTechnique(kind=TechniqueKind.POINTER_SIMULATE, delay_ms=50),
    InteractionTechnique(kind=TechniqueKind.FORCED_ACTIVATE),
    InteractionTechnique(kind=TechniqueKind.KEYBOARD_ACTIVATE, key="Enter"),
]

TEXT_TECHNIQUES = [
    InteractionTechnique(kind=TechniqueKind.FILL),
    InteractionTechnique(kind=TechniqueKind.TYPE_SEQUENTIALLY, delay_ms=30),
    InteractionTechnique(kind=TechniqueKind.SCRIPT_SET_VALUE),
]
