"""Asset authority boundary — ownership, approval, and transfer of assets.

The marketplace never holds assets.  It asks an ``AssetAuthority`` who owns
an asset and who may move it, and asks it to perform the transfer at the
moment of sale.  Any object with the three methods of the protocol works.

``InMemoryAssetRegistry`` is a reference authority with ERC-721-style
semantics: one owner per asset, at most one approved agent per asset
(cleared on every transfer), and optional receiver hooks that run after an
asset lands with its new owner.  Hooks are untrusted code from the
marketplace's point of view; they are how tests model a hostile recipient.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

ReceiveHook = Callable[[str, int, str], None]
"""Called as ``hook(collection, asset_id, sender)`` after a transfer lands."""


class UnknownAssetError(LookupError):
    """Raised when querying an asset that was never minted."""


class AssetTransferError(RuntimeError):
    """Raised when a transfer is not authorized or not possible."""


@runtime_checkable
class AssetAuthority(Protocol):
    """What the marketplace needs from the system of record for assets."""

    def owner_of(self, collection: str, asset_id: int) -> str:
        """Return the live owner of the asset."""
        ...

    def get_approved(self, collection: str, asset_id: int) -> str:
        """Return the approved transfer agent, or ``""`` when none."""
        ...

    def transfer(
        self,
        collection: str,
        asset_id: int,
        sender: str,
        recipient: str,
        *,
        operator: str,
    ) -> None:
        """Move the asset; must raise if *sender* is not the live owner."""
        ...


class InMemoryAssetRegistry:
    """Reference ``AssetAuthority`` holding many collections in memory.

    Examples
    --------
    >>> registry = InMemoryAssetRegistry()
    >>> registry.mint("basic-nft", 0, owner="alice")
    >>> registry.approve("basic-nft", 0, agent="market", caller="alice")
    >>> registry.get_approved("basic-nft", 0)
    'market'
    >>> registry.transfer("basic-nft", 0, "alice", "bob", operator="market")
    >>> registry.owner_of("basic-nft", 0)
    'bob'
    """

    def __init__(self) -> None:
        self._owners: dict[tuple[str, int], str] = {}
        self._approvals: dict[tuple[str, int], str] = {}
        self._receive_hooks: dict[str, list[ReceiveHook]] = {}

    # -- Minting & approval -------------------------------------------------

    def mint(self, collection: str, asset_id: int, owner: str) -> None:
        key = (collection, asset_id)
        if key in self._owners:
            raise AssetTransferError(f"{collection}#{asset_id} already minted.")
        self._owners[key] = owner
        logger.info("Minted %s#%d to %s.", collection, asset_id, owner)

    def approve(self, collection: str, asset_id: int, agent: str, caller: str) -> None:
        """Grant *agent* the right to transfer the asset.  ``""`` revokes."""
        owner = self.owner_of(collection, asset_id)
        if caller != owner:
            raise AssetTransferError(
                f"{caller!r} cannot approve {collection}#{asset_id}: not the owner."
            )
        if agent:
            self._approvals[(collection, asset_id)] = agent
        else:
            self._approvals.pop((collection, asset_id), None)

    # -- AssetAuthority -----------------------------------------------------

    def owner_of(self, collection: str, asset_id: int) -> str:
        try:
            return self._owners[(collection, asset_id)]
        except KeyError:
            raise UnknownAssetError(f"{collection}#{asset_id} does not exist.") from None

    def get_approved(self, collection: str, asset_id: int) -> str:
        self.owner_of(collection, asset_id)
        return self._approvals.get((collection, asset_id), "")

    def transfer(
        self,
        collection: str,
        asset_id: int,
        sender: str,
        recipient: str,
        *,
        operator: str,
    ) -> None:
        key = (collection, asset_id)
        owner = self.owner_of(collection, asset_id)
        if sender != owner:
            raise AssetTransferError(
                f"Cannot transfer {collection}#{asset_id} from {sender!r}: "
                f"owner is {owner!r}."
            )
        if operator != owner and self._approvals.get(key) != operator:
            raise AssetTransferError(
                f"{operator!r} is not approved to transfer {collection}#{asset_id}."
            )
        if not recipient:
            raise AssetTransferError("Cannot transfer to an empty identity.")

        approval = self._approvals.pop(key, None)
        self._owners[key] = recipient
        try:
            for hook in self._receive_hooks.get(recipient, []):
                hook(collection, asset_id, sender)
        except BaseException:
            # A failing hook reverts the transfer it was notified of.
            self._owners[key] = owner
            if approval is not None:
                self._approvals[key] = approval
            raise
        logger.info(
            "Transferred %s#%d from %s to %s.", collection, asset_id, sender, recipient
        )

    # -- Hooks --------------------------------------------------------------

    def on_receive(self, identity: str, hook: ReceiveHook) -> None:
        """Run *hook* every time *identity* receives an asset."""
        self._receive_hooks.setdefault(identity, []).append(hook)
