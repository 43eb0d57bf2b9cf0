"""Typed interface to the Seafile client daemon.

The daemon listens on ``<seafile-data-dir>/seafile.sock`` and speaks
named-pipe framing with the ``seafile-rpcserver`` service name.

Usage:
    transport = SocketTransport.connect_unix(data_dir / SEAFILE_SOCKET_NAME, SEAFILE_SERVICE)
    seafile = bind(SeafileRpc, SearpcClient(transport))
    for repo in seafile.get_repo_list(-1, -1):
        print(repo.name, repo.worktree)
"""

from pydantic import BaseModel, ConfigDict

from searpc_client.core.values import Int64
from searpc_client.stubs.description import rpc_method
from searpc_client.stubs.generator import rpc

SEAFILE_SERVICE = "seafile-rpcserver"
SEAFILE_SOCKET_NAME = "seafile.sock"


class Repo(BaseModel):
    """A library synced by the local daemon."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    worktree: str
    auto_sync: bool = False


class CloneTask(BaseModel):
    model_config = ConfigDict(extra="ignore")

    repo_id: str = ""
    repo_name: str = ""
    state: str = ""
    error: int = 0


class SyncTask(BaseModel):
    model_config = ConfigDict(extra="ignore")

    repo_id: str = ""
    state: str = ""
    error: int = 0


class TransferTask(BaseModel):
    """Progress of a block or fs-object transfer."""

    model_config = ConfigDict(extra="ignore")

    repo_id: str
    block_done: Int64
    block_total: Int64
    rate: Int64
    rt_state: str = ""
    fs_objects_done: Int64 = Int64(0)
    fs_objects_total: Int64 = Int64(0)


@rpc(prefix="seafile", service=SEAFILE_SERVICE)
class SeafileRpc:
    """Functions exported by seaf-daemon."""

    def get_repo_list(self, start: int, limit: int) -> list[Repo]:
        """List repositories. Pass -1 for both arguments to get all of them."""
        ...

    def get_clone_tasks(self) -> list[CloneTask]: ...

    def get_repo_sync_task(self, repo_id: str) -> SyncTask | None:
        """Return the sync task of a repository, or None if there is none."""
        ...

    def find_transfer_task(self, repo_id: str) -> TransferTask: ...

    @rpc_method(name="seafile_is_auto_sync_enabled")
    def is_auto_sync_enabled(self) -> bool: ...

    def sync_error_id_to_str(self, error_id: int) -> str:
        """Translate a sync error id into a readable message."""
        ...

    def get_config(self, key: str) -> str: ...

    def set_config(self, key: str, value: str) -> int: ...

    def set_config_int(self, key: str, value: int) -> int: ...

    @rpc_method(name="seafile_destroy_repo")
    def remove_repo(self, repo_id: str) -> int:
        """Stop syncing a repository and forget it locally."""
        ...

    def download(
        self,
        repo_id: str,
        repo_version: int,
        repo_name: str,
        worktree: str,
        token: str,
        passwd: str | None,
        magic: str | None,
        email: str,
        random_key: str | None,
        enc_version: int,
        more_info: str,
    ) -> str | None:
        """Download a repository into a new folder under ``worktree``.

        Args:
            repo_id: Repository id.
            repo_version: Repository format version.
            repo_name: Repository name.
            worktree: Parent directory of the new local folder.
            token: Sync token issued by the server.
            passwd: Library password, None for unencrypted libraries.
            magic: Encryption magic, None for unencrypted libraries.
            email: Account email.
            random_key: Encrypted file key, None for unencrypted libraries.
            enc_version: Encryption version.
            more_info: Extra options as a JSON-encoded string.

        Returns:
            The clone task id, or None.
        """
        ...

    def clone(
        self,
        repo_id: str,
        repo_version: int,
        repo_name: str,
        worktree: str,
        token: str,
        passwd: str | None,
        magic: str | None,
        email: str,
        random_key: str | None,
        enc_version: int,
        more_info: str,
    ) -> str | None:
        """Sync a repository with an existing local folder. Same arguments as download."""
        ...

    def shutdown(self) -> int:
        """Ask the daemon to exit."""
        ...
