from setuptools import setup, find_packages

setup(
    name="voiceterm",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "requests",
    ],
    extras_require={
        "local": ["openai-whisper"],  # Offline transcription backend
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "voiceterm=voiceterm.cli:main",
        ],
    },
)
