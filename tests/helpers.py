"""Shared test helpers."""

from PySide6.QtCore import QCoreApplication


def wait_for_worker(service):
    """Wait for any background report worker to finish and deliver its signal."""
    if service._worker is not None:
        service._worker.wait(5000)
    QCoreApplication.processEvents()


def user_entry(text, timestamp, uuid="", content=None) -> dict:
    return {
        "type": "user",
        "uuid": uuid,
        "timestamp": timestamp,
        "message": {"role": "user", "content": content if content is not None else text},
    }


def assistant_entry(timestamp, model="claude-sonnet-4-5-20250929", input_tokens=0,
                    output_tokens=0, cache_read=0, cache_creation=0, text="ok",
                    uuid="") -> dict:
    return {
        "type": "assistant",
        "uuid": uuid,
        "timestamp": timestamp,
        "message": {
            "role": "assistant",
            "model": model,
            "content": [{"type": "text", "text": text}],
            "usage": {
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
                "cache_read_input_tokens": cache_read,
                "cache_creation_input_tokens": cache_creation,
            },
        },
    }
