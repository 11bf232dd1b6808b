"""
Interactive filling of [PLACEHOLDER] holes in generated commands.

A placeholder is a bracketed label that starts with a letter and continues
with letters, digits, underscores, spaces or hyphens: `[BRANCH_NAME]`,
`[Commit_Message]`, `[file name]`. Shell syntax is left alone: test
expressions (`[ -f file ]`, `[[ -d src ]]`), globs (`*.[ch]`), array indexes
(`${arr[0]}`), character ranges (`[a-z]`, `[A-Za-z]`) and a label wrapped in a
second pair of brackets (`[[NAME]]`).
"""

import re

PLACEHOLDER_RE = re.compile(
    r'(?<![\[$\w.*])'                                    # not an index, glob or nested bracket
    r'\[(?![A-Za-z0-9]-[A-Za-z0-9](?:[A-Za-z0-9]-[A-Za-z0-9])*\])'  # not a character range
    r'([A-Za-z][A-Za-z0-9_ -]*)\](?!\])'
)


def prompt_label(label):
    return label.replace('_', ' ').strip()


def has_placeholders(command):
    return PLACEHOLDER_RE.search(command) is not None


def resolve(command):
    """Ask for a value for every placeholder occurrence and substitute it in place."""
    if not has_placeholders(command):
        return command

    def ask(match):
        return input(f"{prompt_label(match.group(1))}: ").strip()

    print("\nThis command requires more information:")
    return PLACEHOLDER_RE.sub(ask, command)
