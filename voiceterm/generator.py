"""Turn a spoken request into shell command lines via the chat completions API."""

import time
import logging
import requests

from voiceterm.errors import EmptyInputError, NoChoicesError, ServiceError

logger = logging.getLogger(__name__)

MULTI_COMMAND_PROMPT = """You are an expert shell command assistant. Convert the user's natural language request into executable shell commands.
- Output one command per line, in the order they must run.
- If a piece of information is missing (like a branch name, file name, or commit message), use a placeholder in the format [DESCRIPTION_OF_MISSING_INFO], written in capital letters with underscores.
- Do not add any explanation, conversational text, or markdown formatting. Only output the raw commands."""

SINGLE_COMMAND_PROMPT = """You are an expert shell command assistant. Convert the user's natural language request into a single, executable shell command line.
- If multiple steps are required, chain them together with '&&' or pipes '|'.
- If a piece of information is missing (like a branch name, file name, or commit message), use a placeholder in the format [DESCRIPTION_OF_MISSING_INFO], written in capital letters with underscores.
- Do not add any explanation, conversational text, or markdown formatting. Only output the raw command."""

# Checked in order; longer aliases first so "```shell" is not cut as "```sh".
FENCE_MARKERS = ["```console", "```shell", "```bash", "```zsh", "```sh", "```"]
FENCE_CLOSE = "```"


def strip_code_fence(text):
    """Remove a surrounding markdown code fence if the model added one."""
    text = text.strip()
    for marker in FENCE_MARKERS:
        if text.startswith(marker):
            text = text[len(marker):]
            break
    if text.endswith(FENCE_CLOSE):
        text = text[:-len(FENCE_CLOSE)]
    return text.strip()


def parse_commands(content, mode="multi"):
    """Split a completion into command lines."""
    content = strip_code_fence(content)
    if mode == "single":
        return [content] if content else []
    return [line.strip() for line in content.splitlines() if line.strip()]


class CommandGenerator:
    """Client for the chat completions endpoint."""

    name = "Command generation"

    def __init__(self, api_settings, mode="multi"):
        self.api = api_settings
        self.mode = mode

    def system_prompt(self):
        return SINGLE_COMMAND_PROMPT if self.mode == "single" else MULTI_COMMAND_PROMPT

    def generate_commands(self, text):
        if not text or not text.strip():
            raise EmptyInputError()
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {self.api.api_key}"}
        payload = {
            "model": self.api.completion_model,
            "messages": [{"role": "system", "content": self.system_prompt()}, {"role": "user", "content": text.strip()}],
            "temperature": 0.0,
        }
        start_time = time.time()
        try:
            response = requests.post(self.api.completion_endpoint, headers=headers, json=payload, timeout=self.api.timeout)
        except requests.exceptions.RequestException as e:
            raise ServiceError(self.name, body=str(e)) from e
        logger.info(f"Completion request took {time.time() - start_time:.2f} seconds")
        if not 200 <= response.status_code < 300:
            raise ServiceError(self.name, response.status_code, response.text)
        try:
            choices = response.json()["choices"]
        except (ValueError, KeyError, TypeError) as e:
            raise ServiceError(self.name, response.status_code, response.text) from e
        if not choices:
            raise NoChoicesError()
        try:
            content = choices[0]["message"]["content"] or ""
        except (KeyError, TypeError, IndexError) as e:
            raise ServiceError(self.name, response.status_code, response.text) from e
        commands = parse_commands(content, self.mode)
        logger.debug(f"Parsed {len(commands)} command(s) from completion")
        return commands
