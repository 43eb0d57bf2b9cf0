"""Unit tests for the Seafile daemon interface."""

import pytest

from searpc_client.client import AsyncSearpcClient, SearpcClient
from searpc_client.core.errors import ResultTypeError, RpcError
from searpc_client.rpc.results import CallKind
from searpc_client.seafile import (
    SEAFILE_SERVICE,
    SEAFILE_SOCKET_NAME,
    CloneTask,
    Repo,
    SeafileRpc,
    SyncTask,
    TransferTask,
)
from searpc_client.stubs.generator import bind, compiled_interface, wire_names
from searpc_client.transport.aio import StreamTransport
from searpc_client.transport.framing import NamedPipeFraming
from searpc_client.transport.sync import SocketTransport

REPO = {"id": "r1", "name": "Docs", "worktree": "/home/me/Docs", "auto_sync": True}


def seafile_handler(function_name, args):
    """Minimal stand-in for seaf-daemon."""
    replies = {
        "seafile_get_repo_list": {"ret": [REPO, {"id": "r2", "name": "Pics", "worktree": "/p"}]},
        "seafile_get_clone_tasks": {"ret": None},
        "seafile_get_repo_sync_task": {"ret": None},
        "seafile_find_transfer_task": {
            "ret": {
                "repo_id": "r1",
                "block_done": 3,
                "block_total": 10,
                "rate": 2**33,
                "rt_state": "data",
            }
        },
        "seafile_is_auto_sync_enabled": {"ret": 0},
        "seafile_sync_error_id_to_str": {"ret": f"error {args[0] if args else ''}"},
        "seafile_get_config": {"ret": "true"},
        "seafile_set_config": {"ret": 0},
        "seafile_set_config_int": {"ret": 0},
        "seafile_destroy_repo": {"ret": None, "err_code": 500, "err_msg": "no such repo"},
        "seafile_download": {"ret": "task-1"},
        "seafile_clone": {"ret": None},
        "seafile_shutdown": {"ret": 0},
    }
    return replies[function_name]


@pytest.fixture
def seafile(fake_server):
    sock, server = fake_server(seafile_handler, named_pipe=True)
    client = SearpcClient(SocketTransport(sock, NamedPipeFraming(SEAFILE_SERVICE)))
    yield bind(SeafileRpc, client), server
    client.close()


class TestDeclaration:
    """Tests for the compiled SeafileRpc interface."""

    def test_constants(self):
        assert SEAFILE_SERVICE == "seafile-rpcserver"
        assert SEAFILE_SOCKET_NAME == "seafile.sock"

    def test_service(self):
        assert compiled_interface(SeafileRpc).service == SEAFILE_SERVICE

    def test_wire_names(self):
        names = wire_names(SeafileRpc)
        assert names["get_repo_list"] == "seafile_get_repo_list"
        assert names["is_auto_sync_enabled"] == "seafile_is_auto_sync_enabled"
        assert names["remove_repo"] == "seafile_destroy_repo"
        assert len(names) == 13

    @pytest.mark.parametrize(
        ("method", "kind"),
        [
            ("get_repo_list", CallKind.OBJLIST),
            ("get_clone_tasks", CallKind.OBJLIST),
            ("get_repo_sync_task", CallKind.OBJECT),
            ("find_transfer_task", CallKind.OBJECT),
            ("is_auto_sync_enabled", CallKind.INT),
            ("sync_error_id_to_str", CallKind.STRING),
            ("download", CallKind.STRING),
            ("shutdown", CallKind.INT),
        ],
    )
    def test_call_kinds(self, method, kind):
        assert compiled_interface(SeafileRpc).methods[method].returns.kind is kind

    def test_download_result_is_nullable(self):
        assert compiled_interface(SeafileRpc).methods["download"].returns.nullable


class TestModels:
    """Tests for the daemon's record types."""

    def test_repo_defaults(self):
        repo = Repo.model_validate({"id": "r", "name": "n", "worktree": "/w"})
        assert repo.auto_sync is False

    def test_repo_ignores_unknown_fields(self):
        repo = Repo.model_validate({**REPO, "head_cmmt_id": "abc"})
        assert repo.id == "r1"

    def test_task_defaults(self):
        assert CloneTask.model_validate({}) == CloneTask(repo_id="", repo_name="", state="", error=0)
        assert SyncTask.model_validate({"state": "synchronized"}).error == 0

    def test_transfer_task_requires_counters(self):
        with pytest.raises(ValueError):
            TransferTask.model_validate({"repo_id": "r1"})


class TestCalls:
    """Calls through a named-pipe connection to a fake daemon."""

    def test_get_repo_list(self, seafile):
        rpc, server = seafile
        repos = rpc.get_repo_list(-1, -1)

        assert [r.name for r in repos] == ["Docs", "Pics"]
        assert repos[0].auto_sync is True
        assert server.requests == [["seafile_get_repo_list", -1, -1]]
        assert server.services == [SEAFILE_SERVICE]

    def test_no_clone_tasks(self, seafile):
        rpc, _ = seafile
        assert rpc.get_clone_tasks() == []

    def test_no_sync_task(self, seafile):
        rpc, _ = seafile
        assert rpc.get_repo_sync_task("r1") is None

    def test_transfer_task(self, seafile):
        rpc, _ = seafile
        task = rpc.find_transfer_task("r1")
        assert task.rate == 2**33
        assert task.fs_objects_total == 0

    def test_auto_sync_disabled(self, seafile):
        rpc, server = seafile
        assert rpc.is_auto_sync_enabled() is False
        assert server.frames == [
            b'{"service":"seafile-rpcserver","request":"[\\"seafile_is_auto_sync_enabled\\"]"}'
        ]

    def test_config(self, seafile):
        rpc, server = seafile
        assert rpc.get_config("enable_sync") == "true"
        assert rpc.set_config("enable_sync", "false") == 0
        assert rpc.set_config_int("upload_limit", 100) == 0
        assert server.requests[1:] == [
            ["seafile_set_config", "enable_sync", "false"],
            ["seafile_set_config_int", "upload_limit", 100],
        ]

    def test_remove_repo_error(self, seafile):
        rpc, server = seafile
        with pytest.raises(RpcError) as exc_info:
            rpc.remove_repo("missing")
        assert exc_info.value.code == 500
        assert server.requests == [["seafile_destroy_repo", "missing"]]

    def test_download(self, seafile):
        rpc, server = seafile
        task_id = rpc.download(
            "r1", 1, "Docs", "/home/me", "tok", None, None, "me@example.com", None, 2, "{}"
        )

        assert task_id == "task-1"
        assert server.requests[0] == [
            "seafile_download",
            "r1",
            1,
            "Docs",
            "/home/me",
            "tok",
            None,
            None,
            "me@example.com",
            None,
            2,
            "{}",
        ]

    def test_clone_returns_none(self, seafile):
        rpc, _ = seafile
        assert (
            rpc.clone("r1", 1, "Docs", "/w", "tok", "pw", "magic", "e", "key", 2, "{}") is None
        )

    def test_sync_error_id_to_str(self, seafile):
        rpc, _ = seafile
        assert rpc.sync_error_id_to_str(3) == "error 3"

    def test_shutdown(self, seafile):
        rpc, _ = seafile
        assert rpc.shutdown() == 0

    def test_malformed_repo(self, fake_server, reply_with):
        sock, _ = fake_server(reply_with({"ret": [{"id": "r1"}]}), named_pipe=True)
        with SearpcClient(SocketTransport(sock, NamedPipeFraming(SEAFILE_SERVICE))) as client:
            with pytest.raises(ResultTypeError, match="Repo"):
                bind(SeafileRpc, client).get_repo_list(-1, -1)


class TestAsyncCalls:
    """The same interface over AsyncSearpcClient."""

    @pytest.mark.asyncio
    async def test_repo_list_and_auto_sync(self, fake_server):
        sock, server = fake_server(seafile_handler, named_pipe=True)
        transport = await StreamTransport.from_socket(sock, NamedPipeFraming(SEAFILE_SERVICE))
        async with AsyncSearpcClient(transport) as client:
            rpc = bind(SeafileRpc, client)
            repos = await rpc.get_repo_list(-1, -1)
            enabled = await rpc.is_auto_sync_enabled()

        assert repos[0] == Repo(**REPO)
        assert enabled is False
        assert server.services == [SEAFILE_SERVICE, SEAFILE_SERVICE]
