"""
Batch-Refueled Reactor Facility

This module provides the reactor facility: a core of discrete fuel
assemblies burned for a fixed cycle, a fresh fuel store feeding the core and
a spent fuel store emptied by trading.

Burnup is a static recipe substitution. At the end of each operating cycle
a batch of assemblies is discharged from the core and instantly transmuted
from its fresh recipe to the spent recipe of its fuel type. The reactor then
refuels for at least ``refuel_time`` time steps and starts the next cycle
only once its core is full again. If the spent fuel store has no room for a
batch, the discharge waits until trading frees up space.

Every time step the reactor requests enough fresh assemblies to fill its
fresh store and any space in its core, and offers all of its spent fuel on
the output commodities of the fuels it burned.
"""

from enum import Enum
from itertools import count
import json
import logging
from typing import Dict, List, Optional, Any

from .config import ReactorConfig
from .constants import EPS_RSRC, EVENTS
from .exchange import (
    BidPortfolio,
    CommodRequests,
    RequestPortfolio,
    Trade,
    TradeResponse,
)
from .errors import PartialAssembly
from .fuel import FuelLedger
from .inventory import ResourceBuffer
from .materials import Material
from .recorder import EventRecorder

logger = logging.getLogger(__name__)

_agent_ids = count(1)


class CyclePhase(Enum):
    OPERATING = "operating"
    AWAITING_DISCHARGE = "awaiting_discharge"
    REFUELING = "refueling"
    STALLED = "stalled"


class Reactor:
    """
    Reactor facility driven by a simulation's time steps and exchange.

    Attributes:
        config: Validated reactor parameters
        ledger: Fuel types, scheduled changes and the resource index
        fresh: Fresh assemblies on hand
        core: Assemblies in the core
        spent: Discharged assemblies awaiting trade
        cycle_step: Operating time steps elapsed in the current cycle
        discharged: Whether this cycle's batch has been discharged
        refuel_step: Time steps elapsed since the discharge
    """

    def __init__(
        self,
        config: ReactorConfig,
        recorder: Optional[EventRecorder] = None,
        agent_id: Optional[int] = None,
        name: str = "reactor",
    ):
        self.config = config
        self.recorder = recorder if recorder is not None else EventRecorder()
        self.id = agent_id if agent_id is not None else next(_agent_ids)
        self.name = name

        self.ledger: FuelLedger = config.build_ledger()
        self.fresh = ResourceBuffer(config.fresh_capacity, name="fresh")
        self.core = ResourceBuffer(config.core_capacity, name="core")
        self.spent = ResourceBuffer(config.spent_capacity, name="spent")

        self.cycle_step = config.cycle_step
        self.discharged = config.discharged
        self.refuel_step = 0
        self.time = 0

    def __repr__(self) -> str:
        return (
            f"Reactor(id={self.id}, name={self.name!r}, phase={self.phase.value}, "
            f"cycle_step={self.cycle_step}, fresh={self.fresh.count()}, "
            f"core={self.core.count()}, spent={self.spent.count()})"
        )

    @property
    def assem_size(self) -> float:
        return self.config.assem_size

    def core_space(self) -> int:
        """Whole assemblies the core can still take."""
        return self.core.whole_space(self.assem_size)

    def fresh_space(self) -> int:
        """Whole assemblies the fresh store can still take."""
        return self.fresh.whole_space(self.assem_size)

    def core_full(self) -> bool:
        return self.core_space() == 0

    def check_whole_assembly(self, quantity: float) -> None:
        """Raise PartialAssembly unless ``quantity`` is one assembly."""
        if abs(quantity - self.assem_size) > EPS_RSRC:
            raise PartialAssembly(quantity, self.assem_size)

    @property
    def phase(self) -> CyclePhase:
        """Current cycle phase, derived from the cycle state and inventories."""
        if self.discharged:
            if self.refuel_step >= self.config.refuel_time and not self.core_full():
                return CyclePhase.STALLED
            return CyclePhase.REFUELING
        if self.cycle_step >= self.config.cycle_time:
            return CyclePhase.AWAITING_DISCHARGE
        if self.cycle_step > 0 or self.core_full():
            return CyclePhase.OPERATING
        return CyclePhase.REFUELING

    def record(self, event: str, value: Any = "") -> None:
        self.recorder.record(self.id, self.time, event, value)

    # ------------------------------------------------------------------
    # Time step callbacks
    # ------------------------------------------------------------------

    def enter_notify(self, time: int) -> None:
        """Called once when the reactor enters the simulation."""
        self.time = time
        logger.info(
            "%s entering at t=%d with %d fuel type(s)", self.name, time, len(self.ledger)
        )
        self.record(EVENTS.ENTER)

    def tick(self, time: int) -> None:
        """
        Beginning of a time step.

        Ends refueling once the core is full and ``refuel_time`` has passed,
        so the step that restarts the cycle is an operating step. Then
        discharges the finished cycle's batch (if there is room for it),
        tops the core up from fresh fuel and applies fuel changes scheduled
        for this time step. Discharge happens here so the spent fuel can be
        traded away during this same time step.
        """
        self.time = time
        if (
            self.discharged
            and self.core_full()
            and self.refuel_step >= self.config.refuel_time
        ):
            self.discharged = False
            self.cycle_step = 0
            self.refuel_step = 0

        if self.cycle_step >= self.config.cycle_time and not self.discharged:
            self.discharge()
        self.load()
        self.ledger.apply_due_changes(time)

    def tock(self, time: int) -> None:
        """
        End of a time step.

        Advances the refueling clock or the operating clock. The cycle start
        is recorded in the step that first advances the operating clock.
        """
        self.time = time
        if self.discharged:
            self.refuel_step += 1
            return

        if self.cycle_step == 0 and self.core_full():
            logger.info("%s t=%d cycle start", self.name, time)
            self.record(EVENTS.CYCLE_START)

        if self.cycle_step < self.config.cycle_time and (
            self.cycle_step > 0 or self.core_full()
        ):
            # A core that was never filled does not start the first cycle
            self.cycle_step += 1
            if self.cycle_step == self.config.cycle_time:
                logger.info("%s t=%d cycle end", self.name, time)
                self.record(EVENTS.CYCLE_END)

    # ------------------------------------------------------------------
    # Fuel handling
    # ------------------------------------------------------------------

    def discharge(self) -> bool:
        """
        Move one transmuted batch from the core to the spent fuel store.

        Does nothing if the batch for this cycle was already discharged.

        Returns:
            True if a batch was discharged
        """
        if self.discharged:
            return False

        npop = min(self.config.n_assem_batch, self.core.count())
        if self.spent.whole_space(self.assem_size) < npop:
            logger.warning(
                "%s t=%d discharge failed: no room for %d spent assemblies",
                self.name, self.time, npop,
            )
            self.record(EVENTS.DISCHARGE, "failed")
            return False

        batch = self.core.pop_n(npop)
        self.transmute(batch)
        self.spent.push_all(batch)
        self.discharged = True
        self.refuel_step = 0

        logger.info("%s t=%d discharged %d assemblies", self.name, self.time, npop)
        self.record(EVENTS.DISCHARGE, f"{npop} assemblies")
        return True

    def transmute(self, batch: List[Material]) -> List[Material]:
        """
        Burn ``batch`` to the spent recipe of each assembly's fuel type.

        Masses are unchanged. The spent recipe in effect at the time of the
        call is used.
        """
        for assembly in batch:
            assembly.transmute(self.ledger.fuel_of(assembly).outrecipe)
        self.record(EVENTS.TRANSMUTE, f"{len(batch)} assemblies")
        return batch

    def load(self) -> int:
        """
        Top up the core from the fresh fuel store, oldest assemblies first.

        Returns:
            Number of assemblies moved
        """
        n = min(self.core_space(), self.fresh.count())
        if n == 0:
            return 0

        self.core.push_all(self.fresh.pop_n(n))
        logger.debug("%s t=%d loaded %d assemblies", self.name, self.time, n)
        self.record(EVENTS.LOAD, f"{n} assemblies")
        return n

    def peek_spent(self) -> Dict[str, List[Material]]:
        """
        Spent assemblies grouped by output commodity, oldest first.

        The assemblies stay in the spent fuel store.
        """
        mapped: Dict[str, List[Material]] = {}
        for assembly in self.spent.peek_all():
            commod = self.ledger.fuel_of(assembly).outcommod
            mapped.setdefault(commod, []).append(assembly)
        return mapped

    def check_decommission_condition(self) -> bool:
        """True once the core and spent fuel store are both empty."""
        return self.core.empty() and self.spent.empty()

    # ------------------------------------------------------------------
    # Exchange participation
    # ------------------------------------------------------------------

    def get_requests(self) -> List[RequestPortfolio]:
        """
        Request one assembly per free slot in the fresh store and core.

        Each portfolio asks for one assembly on any of the fuel types, at
        their current preferences and fresh recipes.
        """
        n_order = self.core_space() + self.fresh_space()
        if n_order == 0:
            return []

        ports = []
        for _ in range(n_order):
            port = RequestPortfolio(requester=self)
            for fuel in self.ledger:
                port.add_request(
                    commodity=fuel.incommod,
                    quantity=self.assem_size,
                    recipe=fuel.inrecipe,
                    preference=fuel.preference,
                    exclusive=True,
                )
            ports.append(port)

        self.record(EVENTS.DEMAND, n_order * self.assem_size)
        return ports

    def accept_trades(self, responses: List[TradeResponse]) -> None:
        """
        Receive fresh assemblies.

        Assemblies go straight into the core while it has room, otherwise
        into the fresh fuel store.

        Nothing is received unless every response is valid.

        Raises:
            UnknownResource: If a trade's commodity is not a fuel incommod
            PartialAssembly: If a material is not exactly one assembly
        """
        for trade, assembly in responses:
            self.ledger.index_of(trade.request.commodity)
            self.check_whole_assembly(assembly.quantity)

        nload = min(len(responses), self.core_space())
        if nload > 0:
            self.record(EVENTS.LOAD, f"{nload} assemblies")

        for trade, assembly in responses:
            self.ledger.index_res(assembly, trade.request.commodity)
            if self.core_space() > 0:
                self.core.push(assembly)
            else:
                self.fresh.push(assembly)
        logger.debug(
            "%s t=%d received %d assemblies", self.name, self.time, len(responses)
        )

    def get_bids(self, commod_requests: CommodRequests) -> List[BidPortfolio]:
        """
        Offer spent assemblies against requests on our output commodities.

        Whole assemblies are bid, oldest first, until each request's quantity
        is covered. Each commodity's portfolio is capped at the mass held
        on that commodity. Nothing leaves the spent fuel store here.
        """
        ports: List[BidPortfolio] = []
        all_mats: Optional[Dict[str, List[Material]]] = None

        for commod in self.ledger.unique_outcommods():
            reqs = commod_requests.get(commod, [])
            if not reqs:
                continue
            if all_mats is None:
                all_mats = self.peek_spent()

            mats = all_mats.get(commod, [])
            if not mats:
                continue

            port = BidPortfolio(bidder=self, commodity=commod)
            for req in reqs:
                tot_bid = 0.0
                for assembly in mats:
                    port.add_bid(req, assembly, exclusive=True)
                    tot_bid += assembly.quantity
                    if tot_bid >= req.quantity:
                        break
            port.capacity = sum(m.quantity for m in mats)
            ports.append(port)

        return ports

    def get_trades(self, trades: List[Trade]) -> List[TradeResponse]:
        """
        Hand over spent assemblies for the exchange's confirmed trades.

        The assembly named in a trade's bid is handed over when it is still
        available, otherwise the oldest one on the trade's commodity. Only
        traded assemblies are removed from the spent fuel store.

        Raises:
            ValueError: If more trades arrive on a commodity than assemblies held
            PartialAssembly: If a trade is not for exactly one assembly
        """
        for trade in trades:
            self.check_whole_assembly(trade.amount)

        available = self.peek_spent()
        taken: List[Material] = []
        responses: List[TradeResponse] = []

        for trade in trades:
            commod = trade.request.commodity
            mats = available.get(commod)
            if not mats:
                raise ValueError(
                    f"{self.name} has no spent fuel left on '{commod}' to trade"
                )
            offer = trade.bid.offer
            assembly = offer if offer in mats else mats[0]
            mats.remove(assembly)
            taken.append(assembly)
            responses.append((trade, assembly))

        if taken:
            self.spent.remove(taken)
            logger.debug(
                "%s t=%d traded away %d assemblies", self.name, self.time, len(taken)
            )
            self.record(EVENTS.TRADE, f"{len(taken)} assemblies")
        return responses

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        """Resumable state: cycle state, ledger state and inventories."""
        return {
            "agent_id": self.id,
            "name": self.name,
            "time": self.time,
            "cycle_step": self.cycle_step,
            "discharged": self.discharged,
            "refuel_step": self.refuel_step,
            "ledger": self.ledger.state(),
            "inventories": {
                "fresh": [m.to_dict() for m in self.fresh.peek_all()],
                "core": [m.to_dict() for m in self.core.peek_all()],
                "spent": [m.to_dict() for m in self.spent.peek_all()],
            },
        }

    @classmethod
    def from_snapshot(
        cls,
        config: ReactorConfig,
        state: Dict[str, Any],
        recorder: Optional[EventRecorder] = None,
    ) -> "Reactor":
        """Rebuild a reactor from ``config`` and a :meth:`snapshot` result."""
        reactor = cls(
            config,
            recorder=recorder,
            agent_id=state.get("agent_id"),
            name=state.get("name", "reactor"),
        )
        reactor.time = int(state.get("time", 0))
        reactor.cycle_step = int(state["cycle_step"])
        reactor.discharged = bool(state["discharged"])
        reactor.refuel_step = int(state.get("refuel_step", 0))
        reactor.ledger.restore(state["ledger"])

        inventories = state["inventories"]
        for buf in (reactor.fresh, reactor.core, reactor.spent):
            buf.push_all(Material.from_dict(row) for row in inventories[buf.name])
        return reactor

    def to_json(self, filepath: Optional[str] = None) -> str:
        """
        Export a snapshot to JSON.

        Args:
            filepath: Optional file path to save JSON

        Returns:
            JSON string
        """
        json_str = json.dumps(self.snapshot(), indent=2)

        if filepath:
            with open(filepath, 'w') as f:
                f.write(json_str)

        return json_str

    def summary(self) -> Dict[str, Any]:
        """Current state in a flat dictionary."""
        return {
            "name": self.name,
            "time": self.time,
            "phase": self.phase.value,
            "cycle_step": self.cycle_step,
            "refuel_step": self.refuel_step,
            "discharged": self.discharged,
            "fresh_assemblies": self.fresh.count(),
            "core_assemblies": self.core.count(),
            "spent_assemblies": self.spent.count(),
            "fresh_kg": self.fresh.quantity(),
            "core_kg": self.core.quantity(),
            "spent_kg": self.spent.quantity(),
        }


def create_reactor(
    incommod: str = "fresh_fuel",
    inrecipe: str = "fresh_uox",
    outrecipe: str = "spent_uox",
    outcommod: str = "spent_fuel",
    recorder: Optional[EventRecorder] = None,
    **kwargs
) -> Reactor:
    """
    Factory function to create a single-fuel reactor.

    Args:
        incommod: Fresh fuel commodity
        inrecipe: Fresh fuel recipe
        outrecipe: Spent fuel recipe
        outcommod: Spent fuel commodity
        recorder: Optional shared event recorder
        **kwargs: Additional ReactorConfig parameters

    Returns:
        Configured Reactor instance
    """
    config = ReactorConfig(
        fuel_incommods=[incommod],
        fuel_inrecipes=[inrecipe],
        fuel_outrecipes=[outrecipe],
        fuel_outcommods=[outcommod],
        **kwargs
    )
    return Reactor(config, recorder=recorder)
