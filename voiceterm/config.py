"""
Configuration for VoiceTerm.

Settings live in an INI file under CONFIG_DIR. A default file is written on
first run; OPENAI_API_KEY and VOICETERM_LANGUAGE in the environment take
precedence over what the file says. The parsed file is turned into a frozen
Settings value once at startup and handed to each part of the pipeline.
"""

import os
import tempfile
import configparser
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CONFIG_DIR = os.environ.get("VOICETERM_CONFIG_DIR", os.path.join(os.path.expanduser("~"), ".voiceterm"))
CONFIG_FILE = "config.ini"

DEFAULTS = {
    'API': {
        'api_key': '',
        'transcription_endpoint': 'https://api.openai.com/v1/audio/transcriptions',
        'completion_endpoint': 'https://api.openai.com/v1/chat/completions',
        'transcription_model': 'whisper-1',
        'completion_model': 'gpt-4o',
        'timeout': '60',
    },
    'Transcription': {
        'backend': 'openai',
        'language': 'en',
        'whisper_model': 'base',
    },
    'Recording': {
        'tool': 'rec',
        'rate': '16000',
        'channels': '1',
        'output_path': os.path.join(tempfile.gettempdir(), 'voice_command.wav'),
        'silence_stop': 'false',
        'silence_duration': '3.0',
        'silence_threshold': '3%',
    },
    'Generation': {
        'mode': 'multi',
    },
    'Execution': {
        'shell': '/bin/sh',
        'confirm': 'true',
    },
    'Session': {
        'loop': 'true',
    },
    'Logging': {
        'level': 'WARNING',
    },
}


@dataclass(frozen=True)
class APISettings:
    api_key: str
    transcription_endpoint: str
    completion_endpoint: str
    transcription_model: str
    completion_model: str
    timeout: float


@dataclass(frozen=True)
class TranscriptionSettings:
    backend: str
    language: str
    whisper_model: str


@dataclass(frozen=True)
class RecordingSettings:
    tool: str
    rate: int
    channels: int
    output_path: str
    silence_stop: bool
    silence_duration: float
    silence_threshold: str


@dataclass(frozen=True)
class Settings:
    api: APISettings
    transcription: TranscriptionSettings
    recording: RecordingSettings
    generation_mode: str
    shell: str
    confirm: bool
    loop: bool
    log_level: str


def config_path():
    return os.path.join(CONFIG_DIR, CONFIG_FILE)


def load_config():
    """Load application configuration, creating a default file if none exists."""
    path = config_path()
    config = configparser.ConfigParser()
    config.read_dict(DEFAULTS)
    if not os.path.exists(path):
        try:
            os.makedirs(CONFIG_DIR, exist_ok=True)
            with open(path, 'w') as f:
                config.write(f)
            print(f"Created default configuration at {path}")
        except OSError as e:
            logger.warning(f"Could not write default config to {path}: {e}")
    config.read(path)

    api_key_env = os.environ.get('OPENAI_API_KEY', '').strip()
    if api_key_env:
        config['API']['api_key'] = api_key_env
    language_env = os.environ.get('VOICETERM_LANGUAGE')
    if language_env is not None:
        config['Transcription']['language'] = language_env.strip()
    return config


def build_settings(config):
    """Turn a parsed config into the immutable Settings used by the pipeline."""
    mode = config.get('Generation', 'mode', fallback='multi').strip().lower()
    if mode not in ('multi', 'single'):
        logger.warning(f"Unknown generation mode '{mode}', using 'multi'")
        mode = 'multi'
    backend = config.get('Transcription', 'backend', fallback='openai').strip().lower()
    if backend not in ('openai', 'whisper'):
        logger.warning(f"Unknown transcription backend '{backend}', using 'openai'")
        backend = 'openai'
    return Settings(
        api=APISettings(
            api_key=config.get('API', 'api_key', fallback='').strip(),
            transcription_endpoint=config.get('API', 'transcription_endpoint'),
            completion_endpoint=config.get('API', 'completion_endpoint'),
            transcription_model=config.get('API', 'transcription_model'),
            completion_model=config.get('API', 'completion_model'),
            timeout=config.getfloat('API', 'timeout', fallback=60.0),
        ),
        transcription=TranscriptionSettings(
            backend=backend,
            language=config.get('Transcription', 'language', fallback='').strip(),
            whisper_model=config.get('Transcription', 'whisper_model', fallback='base'),
        ),
        recording=RecordingSettings(
            tool=config.get('Recording', 'tool', fallback='rec'),
            rate=config.getint('Recording', 'rate', fallback=16000),
            channels=config.getint('Recording', 'channels', fallback=1),
            output_path=os.path.expanduser(config.get('Recording', 'output_path')),
            silence_stop=config.getboolean('Recording', 'silence_stop', fallback=False),
            silence_duration=config.getfloat('Recording', 'silence_duration', fallback=3.0),
            silence_threshold=config.get('Recording', 'silence_threshold', fallback='3%'),
        ),
        generation_mode=mode,
        shell=config.get('Execution', 'shell', fallback='/bin/sh'),
        confirm=config.getboolean('Execution', 'confirm', fallback=True),
        loop=config.getboolean('Session', 'loop', fallback=True),
        log_level=config.get('Logging', 'level', fallback='WARNING').upper(),
    )


def setup_logging(level="WARNING"):
    """Configure root logging once for the process."""
    logging.basicConfig(level=getattr(logging, level, logging.WARNING), format='%(asctime)s - %(levelname)s - %(message)s')
