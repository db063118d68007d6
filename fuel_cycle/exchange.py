"""
Resource Exchange Protocol Types

Facilities trade materials through an exchange in three phases per time
step: every facility states what it wants (request portfolios), every
facility offers against the requests it can serve (bid portfolios), and the
exchange matches the two into trades. Suppliers then hand over the
materials for their confirmed trades and requesters receive them.

Nothing here clears a market; these are the messages passed between
facilities and whatever exchange drives them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .materials import Material


@dataclass(eq=False)
class Request:
    """
    A request for material on one commodity.

    Attributes:
        requester: Facility asking for the material
        commodity: Commodity requested
        quantity: Mass wanted [kg]
        recipe: Preferred composition (``None`` accepts any)
        preference: Desirability relative to the requester's other requests
        exclusive: If True, only a bid covering the full quantity can fill it
    """

    requester: Any
    commodity: str
    quantity: float
    recipe: Optional[str] = None
    preference: float = 0.0
    exclusive: bool = False


@dataclass
class RequestPortfolio:
    """
    Requests of which at most one is filled.

    A reactor asking for one assembly on any of several fuel commodities
    puts one request per commodity into the same portfolio.
    """

    requester: Any
    requests: List[Request] = field(default_factory=list)

    def add_request(
        self,
        commodity: str,
        quantity: float,
        recipe: Optional[str] = None,
        preference: float = 0.0,
        exclusive: bool = False,
    ) -> Request:
        req = Request(
            requester=self.requester,
            commodity=commodity,
            quantity=quantity,
            recipe=recipe,
            preference=preference,
            exclusive=exclusive,
        )
        self.requests.append(req)
        return req

    @property
    def quantity(self) -> float:
        """Mass the portfolio is after (one request's worth)."""
        return max((r.quantity for r in self.requests), default=0.0)


@dataclass(eq=False)
class Bid:
    """
    An offer of one material against one request.

    Attributes:
        request: The request being answered
        offer: Material offered (still owned by the bidder)
        bidder: Facility making the offer
        exclusive: If True, the offer cannot be split
    """

    request: Request
    offer: Material
    bidder: Any
    exclusive: bool = False

    @property
    def quantity(self) -> float:
        return self.offer.quantity


@dataclass
class BidPortfolio:
    """
    Bids from one facility on one commodity, sharing a capacity limit.

    Attributes:
        bidder: Facility making the bids
        commodity: Commodity offered
        bids: Individual offers
        capacity: Total mass the bidder can deliver across all bids [kg]
    """

    bidder: Any
    commodity: str
    bids: List[Bid] = field(default_factory=list)
    capacity: float = float("inf")

    def add_bid(self, request: Request, offer: Material, exclusive: bool = False) -> Bid:
        bid = Bid(request=request, offer=offer, bidder=self.bidder, exclusive=exclusive)
        self.bids.append(bid)
        return bid


@dataclass
class Trade:
    """A matched request and bid for ``amount`` kg."""

    request: Request
    bid: Bid
    amount: float

    @property
    def commodity(self) -> str:
        return self.request.commodity


CommodRequests = Dict[str, List[Request]]
TradeResponse = Tuple[Trade, Material]


class ExchangeParticipant(Protocol):
    """Callbacks a facility exposes to the simulation driver."""

    def enter_notify(self, time: int) -> None:
        ...

    def tick(self, time: int) -> None:
        ...

    def tock(self, time: int) -> None:
        ...

    def get_requests(self) -> List[RequestPortfolio]:
        ...

    def get_bids(self, commod_requests: CommodRequests) -> List[BidPortfolio]:
        ...

    def get_trades(self, trades: List[Trade]) -> List[TradeResponse]:
        ...

    def accept_trades(self, responses: List[TradeResponse]) -> None:
        ...


def group_by_commodity(portfolios: List[RequestPortfolio]) -> CommodRequests:
    """Requests from all portfolios keyed by commodity, in portfolio order."""
    grouped: CommodRequests = {}
    for port in portfolios:
        for req in port.requests:
            grouped.setdefault(req.commodity, []).append(req)
    return grouped
