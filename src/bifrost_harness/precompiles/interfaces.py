"""
Canonical interfaces of the Bifrost precompiles.

Each precompile is described once, by its fixed address and the Solidity
signatures it dispatches on. Selector tables are generated from these.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

from ..errors import ValidationError
from .selectors import SelectorTable


@dataclass(frozen=True)
class Precompile:
    name: str
    address: str
    signatures: tuple[str, ...]

    @cached_property
    def selectors(self) -> SelectorTable:
        return SelectorTable.from_signatures(self.signatures, precompile=self.name)


STAKING = Precompile(
    name="staking",
    address="0x0000000000000000000000000000000000000400",
    signatures=(
        # Common storage getters
        "is_nominator(address)",
        "is_candidate(address,uint256)",
        "is_selected_candidate(address,uint256)",
        "is_selected_candidates(address[],uint256)",
        "is_complete_selected_candidates(address[],uint256)",
        "is_previous_selected_candidate(uint256,address)",
        "is_previous_selected_candidates(uint256,address[])",
        "validator_seats()",
        "candidate_minimum_self_bond()",
        "candidate_minimum_voting_power()",
        "round_info()",
        "latest_round()",
        "majority()",
        "previous_majority(uint256)",
        "points(uint256)",
        "validator_points(uint256,address)",
        "rewards()",
        "total(uint256)",
        "inflation_config()",
        "inflation_rate()",
        "estimated_yearly_return(address[],uint256[])",
        "estimated_yearly_return_on_bond_less(address,address[],uint256[])",
        "min_nomination()",
        "max_nominations_per_nominator()",
        "max_nominations_per_candidate()",
        "candidate_bond_less_delay()",
        "nominator_bond_less_delay()",
        # Validator storage getters
        "candidate_count()",
        "selected_candidates(uint256)",
        "previous_selected_candidates(uint256)",
        "candidate_pool()",
        "candidate_state(address)",
        "candidate_states(uint256)",
        "candidate_states_by_selection(uint256,bool)",
        "candidate_request(address)",
        "candidate_top_nominations(address)",
        "candidate_bottom_nominations(address)",
        "candidate_nomination_count(address)",
        # Nominator storage getters
        "nominator_state(address)",
        "nominator_requests(address)",
        "nominator_nomination_count(address)",
        # Common dispatchable methods
        "go_offline()",
        "go_online()",
        # Validator dispatchable methods
        "join_candidates(address,address,uint256,uint256)",
        "candidate_bond_more(uint256)",
        "schedule_leave_candidates(uint256)",
        "schedule_candidate_bond_less(uint256)",
        "execute_leave_candidates(uint256)",
        "execute_candidate_bond_less()",
        "cancel_leave_candidates(uint256)",
        "cancel_candidate_bond_less()",
        "set_validator_commission(uint256)",
        "set_controller(address)",
        "set_candidate_reward_dst(uint256)",
        # Nominator dispatchable methods
        "nominate(address,uint256,uint256,uint256)",
        "nominator_bond_more(address,uint256)",
        "schedule_leave_nominators()",
        "schedule_revoke_nomination(address)",
        "schedule_nominator_bond_less(address,uint256)",
        "execute_leave_nominators(uint256)",
        "execute_nomination_request(address)",
        "cancel_leave_nominators()",
        "cancel_nomination_request(address)",
        "set_nominator_reward_dst(uint256)",
    ),
)

OFFENCES = Precompile(
    name="offences",
    address="0x0000000000000000000000000000000000000500",
    signatures=(
        "maximum_offence_count(uint256)",
        "validator_offence(address)",
        "validator_offences(address[])",
    ),
)

GOVERNANCE = Precompile(
    name="governance",
    address="0x0000000000000000000000000000000000000800",
    signatures=(
        # Storage getters
        "public_prop_count()",
        "deposit_of(uint256)",
        "voting_of(uint256)",
        "account_votes(address)",
        "lowest_unbaked()",
        "ongoing_referendum_info(uint256)",
        "finished_referendum_info(uint256)",
        # Dispatchable methods
        "propose(bytes32,uint256)",
        "second(uint256,uint256)",
        "vote(uint256,bool,uint256,uint256)",
        "remove_vote(uint256)",
        "delegate(address,uint256,uint256)",
        "undelegate()",
        "unlock(address)",
        "note_preimage(bytes)",
        "note_imminent_preimage(bytes)",
    ),
)

BALANCES = Precompile(
    name="balances",
    address="0x0000000000000000000000000000000000001000",
    signatures=("total_issuance()",),
)

RELAY_MANAGER = Precompile(
    name="relay-manager",
    address="0x0000000000000000000000000000000000002000",
    signatures=(
        # Storage getters
        "is_relayer(address)",
        "is_selected_relayer(address,bool)",
        "is_relayers(address[])",
        "is_selected_relayers(address[],bool)",
        "is_complete_selected_relayers(address[],bool)",
        "is_previous_selected_relayer(uint256,address,bool)",
        "is_previous_selected_relayers(uint256,address[],bool)",
        "is_heartbeat_pulsed(address)",
        "selected_relayers(bool)",
        "previous_selected_relayers(uint256,bool)",
        "relayer_pool()",
        "majority(bool)",
        "previous_majority(uint256,bool)",
        "latest_round()",
        "relayer_state(address)",
        "relayer_states()",
        # Dispatchable methods
        "heartbeat()",
    ),
)

PRECOMPILES: dict[str, Precompile] = {
    p.name: p for p in (STAKING, OFFENCES, GOVERNANCE, BALANCES, RELAY_MANAGER)
}


def get_precompile(name: str) -> Precompile:
    try:
        return PRECOMPILES[name.lower().replace("_", "-")]
    except KeyError:
        raise ValidationError(
            f"Unknown precompile '{name}'. Known: {', '.join(sorted(PRECOMPILES))}"
        ) from None
