import pytest

from path_owners.accounts import Account, AccountRegistry, Group
from path_owners.resolver import PathOwners
from path_owners.test.fixtures import ALICE, BOB, CAROL, DAVE, EVE, InMemoryBlobReader


@pytest.fixture
def accounts() -> AccountRegistry:
    return AccountRegistry(
        accounts=[
            Account(id=ALICE, username="alice", emails=["alice@example.com"]),
            Account(
                id=BOB,
                username="bob",
                emails=["bob@example.com"],
                full_name="Bob Builder",
            ),
            Account(id=CAROL, username="carol", emails=["carol@example.com"]),
            Account(id=DAVE, username="dave", emails=["dave@example.com"]),
            Account(id=EVE, username="eve", emails=["eve@example.com"], active=False),
        ],
        groups=[
            Group(name="Maintainers", uuid="abc123", members=[BOB, CAROL]),
            Group(name="Admins", members=[DAVE], subgroups=["Maintainers"]),
        ],
    )


@pytest.fixture
def blobs() -> InMemoryBlobReader:
    return InMemoryBlobReader()


@pytest.fixture
def engine(accounts: AccountRegistry, blobs: InMemoryBlobReader) -> PathOwners:
    return PathOwners(accounts=accounts, blob_reader=blobs)
