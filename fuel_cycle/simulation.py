"""
Simulation Driver

This module owns the time stepping loop. Each time step every facility
ticks, the exchange collects requests and bids and matches them into
trades, suppliers hand over the traded materials, requesters receive them,
and every facility tocks.

The exchange here is a small greedy matcher, enough to run reactors
against simple fuel sources and spent fuel sinks. Facilities only see the
protocol types from :mod:`fuel_cycle.exchange`, so any other exchange can be
substituted.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .constants import EPS_RSRC
from .exchange import (
    BidPortfolio,
    CommodRequests,
    ExchangeParticipant,
    RequestPortfolio,
    Trade,
    TradeResponse,
    group_by_commodity,
)
from .materials import Material
from .reactor import CyclePhase, Reactor
from .recorder import EventRecorder

logger = logging.getLogger(__name__)


class GreedyExchange:
    """
    Match requests to bids in request order.

    Within each request portfolio the highest-preference request that can
    be served is filled, as far as the bids allow, and the portfolio's other
    requests are dropped. An offered material is traded at most once and a
    bid portfolio never delivers more than its capacity.
    """

    def clear(
        self,
        request_ports: Sequence[RequestPortfolio],
        bid_ports: Sequence[BidPortfolio],
    ) -> List[Trade]:
        bids_by_request: Dict[int, list] = {}
        for bport in bid_ports:
            for bid in bport.bids:
                bids_by_request.setdefault(id(bid.request), []).append((bport, bid))

        capacity_left = {id(bport): bport.capacity for bport in bid_ports}
        used_offers = set()
        trades: List[Trade] = []

        for rport in request_ports:
            ranked = sorted(rport.requests, key=lambda r: r.preference, reverse=True)
            for req in ranked:
                filled = self._fill(
                    req, bids_by_request.get(id(req), []), capacity_left, used_offers
                )
                if filled:
                    trades.extend(filled)
                    break
        return trades

    @staticmethod
    def _fill(req, candidates, capacity_left, used_offers) -> List[Trade]:
        remaining = req.quantity
        trades = []
        for bport, bid in candidates:
            if remaining <= EPS_RSRC:
                break
            if bid.bidder is req.requester or bid.offer.obj_id in used_offers:
                continue

            whole = bid.exclusive or req.exclusive
            amount = bid.quantity if whole else min(bid.quantity, remaining)
            if whole and amount - remaining > EPS_RSRC:
                continue
            if req.exclusive and req.quantity - amount > EPS_RSRC:
                continue
            if amount - capacity_left[id(bport)] > EPS_RSRC or amount <= 0:
                continue

            trades.append(Trade(request=req, bid=bid, amount=amount))
            used_offers.add(bid.offer.obj_id)
            capacity_left[id(bport)] -= amount
            remaining -= amount
        return trades


class FuelSource:
    """
    Supplies fresh material on one commodity.

    Attributes:
        commod: Commodity offered
        recipe: Recipe of supplied material (None: whatever is requested)
        throughput: Mass that can be supplied per time step [kg]
    """

    def __init__(
        self,
        commod: str,
        recipe: Optional[str] = None,
        throughput: float = float("inf"),
        name: str = "source",
    ):
        self.commod = commod
        self.recipe = recipe
        self.throughput = throughput
        self.name = name
        self.supplied = 0.0

    def enter_notify(self, time: int) -> None:
        pass

    def tick(self, time: int) -> None:
        pass

    def tock(self, time: int) -> None:
        pass

    def get_requests(self) -> List[RequestPortfolio]:
        return []

    def get_bids(self, commod_requests: CommodRequests) -> List[BidPortfolio]:
        reqs = commod_requests.get(self.commod, [])
        if not reqs or self.throughput <= 0:
            return []
        port = BidPortfolio(bidder=self, commodity=self.commod, capacity=self.throughput)
        for req in reqs:
            qty = min(req.quantity, self.throughput)
            recipe = self.recipe if self.recipe is not None else req.recipe
            port.add_bid(req, Material(quantity=qty, recipe=recipe or ""))
        return [port]

    def get_trades(self, trades: List[Trade]) -> List[TradeResponse]:
        responses = []
        for trade in trades:
            offer = trade.bid.offer
            if trade.amount < offer.quantity:
                offer = Material(quantity=trade.amount, recipe=offer.recipe)
            self.supplied += offer.quantity
            responses.append((trade, offer))
        return responses

    def accept_trades(self, responses: List[TradeResponse]) -> None:
        pass


class FuelSink:
    """
    Takes material on its commodities until its capacity is reached.

    Attributes:
        commods: Commodities accepted
        capacity: Total mass it can hold [kg]
        throughput: Mass it can take per time step [kg]
        inventory: Materials received so far
    """

    def __init__(
        self,
        commods: Sequence[str],
        capacity: float = float("inf"),
        throughput: float = float("inf"),
        name: str = "sink",
    ):
        self.commods = list(commods)
        self.capacity = capacity
        self.throughput = throughput
        self.name = name
        self.inventory: List[Material] = []

    def quantity(self) -> float:
        return sum(m.quantity for m in self.inventory)

    def enter_notify(self, time: int) -> None:
        pass

    def tick(self, time: int) -> None:
        pass

    def tock(self, time: int) -> None:
        pass

    def get_requests(self) -> List[RequestPortfolio]:
        want = min(self.capacity - self.quantity(), self.throughput)
        if want <= EPS_RSRC:
            return []
        ports = []
        for commod in self.commods:
            port = RequestPortfolio(requester=self)
            port.add_request(commodity=commod, quantity=want)
            ports.append(port)
        return ports

    def get_bids(self, commod_requests: CommodRequests) -> List[BidPortfolio]:
        return []

    def get_trades(self, trades: List[Trade]) -> List[TradeResponse]:
        return []

    def accept_trades(self, responses: List[TradeResponse]) -> None:
        self.inventory.extend(m for _, m in responses)


class Simulation:
    """
    Discrete time stepping loop over a set of facilities.

    Attributes:
        duration: Number of time steps to run
        exchange: Request/bid matcher
        recorder: Event log shared with the facilities
        agents: Facilities in the order they are called
        time: Current time step
    """

    def __init__(
        self,
        duration: int,
        exchange: Optional[GreedyExchange] = None,
        recorder: Optional[EventRecorder] = None,
    ):
        if duration <= 0:
            raise ValueError(f"Duration must be positive, got {duration}")
        self.duration = duration
        self.exchange = exchange if exchange is not None else GreedyExchange()
        self.recorder = recorder if recorder is not None else EventRecorder()
        self.agents: List[ExchangeParticipant] = []
        self.time = 0
        self._entered = set()
        self.history: Dict[str, Dict[str, np.ndarray]] = {}

    def add_agent(self, agent: ExchangeParticipant) -> ExchangeParticipant:
        """Add a facility; reactors are given the shared recorder."""
        if isinstance(agent, Reactor):
            if agent.name in self.history:
                raise ValueError(f"A reactor named '{agent.name}' was already added")
            agent.recorder = self.recorder
            self.history[agent.name] = {
                "fresh": np.zeros(self.duration, dtype=int),
                "core": np.zeros(self.duration, dtype=int),
                "spent": np.zeros(self.duration, dtype=int),
                "operating": np.zeros(self.duration, dtype=bool),
            }
        self.agents.append(agent)
        return agent

    def step(self) -> None:
        """Run one time step."""
        t = self.time
        if t >= self.duration:
            raise RuntimeError(f"Simulation already ran its {self.duration} time steps")

        for agent in self.agents:
            if id(agent) not in self._entered:
                agent.enter_notify(t)
                self._entered.add(id(agent))

        for agent in self.agents:
            agent.tick(t)

        self._resolve_exchange()
        self._sample(t)

        for agent in self.agents:
            agent.tock(t)
        self.time += 1

    def run(self) -> Dict[str, Dict[str, np.ndarray]]:
        """Run all remaining time steps and return the inventory history."""
        logger.info("running %d time steps with %d agents", self.duration, len(self.agents))
        while self.time < self.duration:
            self.step()
        return self.history

    def _resolve_exchange(self) -> None:
        request_ports: List[RequestPortfolio] = []
        for agent in self.agents:
            request_ports.extend(agent.get_requests())
        commod_requests = group_by_commodity(request_ports)

        # All bids are collected before any trade executes
        bid_ports: List[BidPortfolio] = []
        for agent in self.agents:
            bid_ports.extend(agent.get_bids(commod_requests))

        trades = self.exchange.clear(request_ports, bid_ports)
        if not trades:
            return
        logger.debug("t=%d %d trade(s) matched", self.time, len(trades))

        by_bidder: Dict[int, List[Trade]] = {}
        for trade in trades:
            by_bidder.setdefault(id(trade.bid.bidder), []).append(trade)

        by_requester: Dict[int, List[TradeResponse]] = {}
        for agent in self.agents:
            agent_trades = by_bidder.get(id(agent))
            if not agent_trades:
                continue
            for trade, material in agent.get_trades(agent_trades):
                by_requester.setdefault(id(trade.request.requester), []).append(
                    (trade, material)
                )

        for agent in self.agents:
            responses = by_requester.get(id(agent))
            if responses:
                agent.accept_trades(responses)

    def _sample(self, t: int) -> None:
        for agent in self.agents:
            if not isinstance(agent, Reactor):
                continue
            hist = self.history[agent.name]
            hist["fresh"][t] = agent.fresh.count()
            hist["core"][t] = agent.core.count()
            hist["spent"][t] = agent.spent.count()
            hist["operating"][t] = agent.phase is CyclePhase.OPERATING

    def capacity_factor(self, name: str) -> float:
        """Fraction of the elapsed time steps a reactor spent operating."""
        operating = self.history[name]["operating"][: self.time]
        if operating.size == 0:
            return 0.0
        return float(np.mean(operating))

    def summary(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "duration": self.duration,
            "reactors": {
                name: {
                    "capacity_factor": self.capacity_factor(name),
                    "max_spent": int(np.max(hist["spent"][: max(self.time, 1)])),
                }
                for name, hist in self.history.items()
            },
            "events": len(self.recorder),
        }
