"""
Speech Archiver.

Entry point that transcribes speech and archives the transcript.
"""

import asyncio

from ddtrace import patch_all
from ddtrace.trace import tracer

from speech_archiver.console import print_event
from speech_archiver.dependencies import get_pipeline, wait_for_key

patch_all()


def main():
    """Runs the pipeline once and waits for a keypress."""
    pipeline = get_pipeline(listener=print_event)
    print("Say something...")
    with tracer.trace("speech_archiver.pipeline"):
        asyncio.run(pipeline.run())

    if wait_for_key():
        print("Please press Enter to continue.")
        input()


if __name__ == "__main__":
    main()
