"""Strip terminal control sequences from captured shell output"""

import re

# ESC ] ... terminated by BEL or ESC \ (e.g. iTerm2 "OSC 1337" reports)
OSC_PATTERN = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")

# ESC [ parameters intermediates final-letter
CSI_PATTERN = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")

# Remaining C0 controls and DEL, newline excepted
CONTROL_PATTERN = re.compile(r"[\x00-\x09\x0b-\x1f\x7f]")


def strip_control_sequences(text: str) -> str:
    """Remove OSC and CSI sequences, then any stray control byte but newline"""
    if not text:
        return ""
    text = OSC_PATTERN.sub("", text)
    text = CSI_PATTERN.sub("", text)
    return CONTROL_PATTERN.sub("", text)
