"""
Unit tests for the transfer client, with the WebSocket connection scripted.
"""

import json

import pytest
from websockets.datastructures import Headers
from websockets.exceptions import InvalidStatus
from websockets.http11 import Response

from ystp.client import receive_file, send_file
from ystp.core.exceptions import RelayError, SessionConflict, SessionNotReady


class ScriptedSocket:
    """Replays scripted server frames and records what the client sends."""

    def __init__(self, script):
        self.script = list(script)
        self.sent = []

    async def recv(self):
        frame = self.script.pop(0)
        if isinstance(frame, Exception):
            raise frame
        return frame

    async def send(self, frame):
        self.sent.append(frame)


class ScriptedConnect:
    """Stand-in for websockets' connect(): records the URL and yields a ScriptedSocket."""

    def __init__(self, script=(), status=None):
        self.socket = ScriptedSocket(script)
        self.status = status
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        return self

    async def __aenter__(self):
        if self.status is not None:
            raise InvalidStatus(Response(self.status, "Locked", Headers()))
        return self.socket

    async def __aexit__(self, *exc_info):
        return False


class TestSendFile:
    """send_file"""

    @pytest.mark.asyncio
    async def test_sends_metadata_chunks_and_eof(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes(b"0123456789")
        connect = ScriptedConnect(['{"code":"a-b-c"}', "LET_IT_RIP"])
        codes, progress = [], []

        code = await send_file(
            path,
            "ws://relay.test:8787/",
            chunk_size=4,
            on_code=codes.append,
            on_progress=lambda sent, total: progress.append((sent, total)),
            connect_fn=connect,
        )

        assert code == "a-b-c"
        assert codes == ["a-b-c"]
        assert connect.urls == ["ws://relay.test:8787/send"]
        assert json.loads(connect.socket.sent[0]) == {"name": "notes.txt", "size": 10}
        assert connect.socket.sent[1:] == [b"0123", b"4567", b"89", "EOF"]
        assert progress == [(4, 10), (8, 10), (10, 10)]

    @pytest.mark.asyncio
    async def test_empty_file_sends_only_eof(self, tmp_path):
        path = tmp_path / "empty.bin"
        path.write_bytes(b"")
        connect = ScriptedConnect(['{"code":"a-b"}', "LET_IT_RIP"])

        await send_file(path, "ws://relay.test", connect_fn=connect)

        assert connect.socket.sent[1:] == ["EOF"]

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            await send_file(tmp_path / "missing", "ws://relay.test", connect_fn=ScriptedConnect())

    @pytest.mark.asyncio
    async def test_rejected_handshake_is_conflict(self, tmp_path):
        path = tmp_path / "f"
        path.write_bytes(b"x")

        with pytest.raises(SessionConflict):
            await send_file(path, "ws://relay.test", connect_fn=ScriptedConnect(status=423))


class TestReceiveFile:
    """receive_file"""

    @pytest.mark.asyncio
    async def test_writes_frames_until_eof(self, tmp_path):
        connect = ScriptedConnect(['{"name":"../evil.txt","size":5}', b"he", b"", "ll", b"o", "EOF"])
        seen = []

        path = await receive_file(
            "a b", "ws://relay.test", output_dir=tmp_path, on_metadata=seen.append, connect_fn=connect
        )

        assert path == tmp_path / "evil.txt"
        assert path.read_bytes() == b"hello"
        assert seen[0].name == "../evil.txt"
        assert connect.socket.sent == ["LET_IT_RIP"]
        assert connect.urls == ["ws://relay.test/receive/a%20b"]

    @pytest.mark.asyncio
    async def test_existing_file_is_kept(self, tmp_path):
        existing = tmp_path / "f.txt"
        existing.write_bytes(b"keep me")
        connect = ScriptedConnect(['{"name":"f.txt","size":3}'])

        with pytest.raises(FileExistsError):
            await receive_file("a-b", "ws://relay.test", output_dir=tmp_path, connect_fn=connect)

        assert existing.read_bytes() == b"keep me"
        assert connect.socket.sent == []

    @pytest.mark.asyncio
    async def test_overwrite(self, tmp_path):
        (tmp_path / "f.txt").write_bytes(b"old")
        connect = ScriptedConnect(['{"name":"f.txt","size":3}', b"new", "EOF"])

        path = await receive_file(
            "a-b", "ws://relay.test", output_dir=tmp_path, overwrite=True, connect_fn=connect
        )

        assert path.read_bytes() == b"new"

    @pytest.mark.asyncio
    async def test_partial_file_removed_on_failure(self, tmp_path):
        connect = ScriptedConnect(['{"name":"f.txt","size":10}', b"part", ConnectionError("lost")])

        with pytest.raises(ConnectionError):
            await receive_file("a-b", "ws://relay.test", output_dir=tmp_path, connect_fn=connect)

        assert not (tmp_path / "f.txt").exists()

    @pytest.mark.asyncio
    async def test_not_ready(self, tmp_path):
        with pytest.raises(SessionNotReady):
            await receive_file("a-b", "ws://relay.test", output_dir=tmp_path,
                               connect_fn=ScriptedConnect(status=423))

    @pytest.mark.asyncio
    async def test_unexpected_status(self, tmp_path):
        with pytest.raises(RelayError) as excinfo:
            await receive_file("a-b", "ws://relay.test", output_dir=tmp_path,
                               connect_fn=ScriptedConnect(status=500))

        assert not isinstance(excinfo.value, SessionNotReady)
