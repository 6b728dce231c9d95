import base64

import pytest


def encode(text: str) -> str:
    """Encode text the way Gmail does (base64url, padding stripped)."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def make_message(
    body=None,
    sender="Bancolombia <alertasynotificaciones@an.notificacionesbancolombia.com>",
    subject=None,
    date="Mon, 15 Jan 2024 10:30:00 -0500",
    parts=None,
    message_id="msg-1",
    mime_type="text/plain",
):
    headers = []
    if sender is not None:
        headers.append({"name": "From", "value": sender})
    if subject is not None:
        headers.append({"name": "Subject", "value": subject})
    if date is not None:
        headers.append({"name": "Date", "value": date})

    payload = {"mimeType": mime_type, "headers": headers}
    if parts is not None:
        payload["mimeType"] = "multipart/alternative"
        payload["body"] = {"size": 0}
        payload["parts"] = parts
    else:
        payload["body"] = {"data": encode(body)} if body is not None else {"size": 0}

    return {"id": message_id, "threadId": "thread-1", "payload": payload}


def make_part(text, mime_type="text/plain"):
    return {"mimeType": mime_type, "body": {"data": encode(text)}}


NEQUI_SENDER = "Nequi <notificaciones@nequi.com.co>"
DAVIPLATA_SENDER = "DaviPlata <daviplata@davivienda.com>"


@pytest.fixture
def db_path(tmp_path):
    from alertas.store import init_db

    path = str(tmp_path / "alertas.db")
    init_db(path)
    return path
