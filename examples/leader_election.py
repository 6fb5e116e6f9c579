"""
Leader Election Example

Several instances of a service race for one lock named after the cluster.
The instance that gets it is the leader until it closes its session; the
others stay followers. If the leader process dies, PostgreSQL ends its
session and the lock becomes free for the next election.

Set DATABASE_URL to run against PostgreSQL; otherwise the in-memory backend
is used.

Run with: python examples/leader_election.py
"""

import asyncio
import os

from pglock import InMemoryLockBackend, LockBackend, PostgreSQLLockBackend, lock_key, open_lock


def create_backend() -> LockBackend:
    url = os.environ.get("DATABASE_URL")
    if url:
        return PostgreSQLLockBackend.from_url(url, enable_tracing=False)
    return InMemoryLockBackend()


class LeaderElector:
    """Runs leader duties while holding the cluster's advisory lock."""

    def __init__(self, backend: LockBackend, cluster_name: str, instance_id: str) -> None:
        self._backend = backend
        self._key = lock_key(cluster_name, namespace="leader")
        self.instance_id = instance_id
        self.is_leader = False

    async def run_election(self, duties: int = 3) -> None:
        async with await open_lock(self._backend, self._key, enable_tracing=False) as lock:
            if not await lock.try_lock():
                print(f"Instance {self.instance_id} is a follower (another instance is leader)")
                return

            self.is_leader = True
            print(f"Instance {self.instance_id} became leader")
            try:
                await self._perform_leader_duties(duties)
            finally:
                self.is_leader = False
                await lock.unlock()
                print(f"Instance {self.instance_id} stepped down")

    async def _perform_leader_duties(self, duties: int) -> None:
        for count in range(1, duties + 1):
            print(f"  [Leader {self.instance_id}] Performing periodic task #{count}...")
            await asyncio.sleep(0.2)


async def main() -> None:
    print("Starting leader election simulation...")
    print("Simulating 3 instances competing for leadership\n")

    backend = create_backend()
    electors = [LeaderElector(backend, "my-cluster", f"instance-{i}") for i in range(1, 4)]

    tasks = []
    for elector in electors:
        tasks.append(asyncio.create_task(elector.run_election()))
        # Stagger the starts slightly
        await asyncio.sleep(0.05)
    await asyncio.gather(*tasks)

    if isinstance(backend, PostgreSQLLockBackend):
        await backend.dispose()

    print("\nLeader election simulation completed!")


if __name__ == "__main__":
    asyncio.run(main())
