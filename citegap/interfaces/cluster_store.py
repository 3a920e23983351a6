"""Persistence interface for semantic clusters."""

from typing import Protocol, runtime_checkable

from citegap.core.models.cluster import ClusterMemberRow, ClusterRow


@runtime_checkable
class ClusterStore(Protocol):
    """Write access to a project's persisted clusters."""

    async def delete_project_clusters(self, project_id: str) -> None:
        """Remove every stored cluster (and its memberships) of the project."""
        ...

    async def insert_cluster(self, row: ClusterRow) -> str:
        """Insert a cluster row and return its id."""
        ...

    async def upsert_cluster_member(self, row: ClusterMemberRow) -> None:
        """Insert a membership, updating similarity on (cluster_id, article_id) conflict."""
        ...
