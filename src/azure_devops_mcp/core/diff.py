"""
Unified Diff Synthesis

Builds a unified diff between two full texts with difflib. The output is
opaque to the rest of the package and is bounded like any other text.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
    synthesize_diff("/a.txt", "/a.txt", "one\\ntwo\\n", "one\\nthree\\n")

Expected output:
    --- /a.txt
    +++ /a.txt
    @@ -1,2 +1,2 @@
     one
    -two
    +three
"""

import difflib

DIFF_CONTEXT_LINES = 4


def synthesize_diff(old_label: str, new_label: str, old_text: str, new_text: str) -> str:
    """
    Produce a unified diff of old_text against new_text.

    Args:
        old_label: Name shown on the '---' line
        new_label: Name shown on the '+++' line
        old_text: Previous content (empty for added files)
        new_text: Current content (empty for deleted files)

    Returns:
        str: Unified diff text, empty when the texts are identical
    """
    diff = difflib.unified_diff(
        old_text.splitlines(),
        new_text.splitlines(),
        fromfile=old_label,
        tofile=new_label,
        n=DIFF_CONTEXT_LINES,
        lineterm="",
    )
    return "\n".join(diff)
