from sigmabus.poseidon.config import PoseidonConfig, poseidon_test_config
from sigmabus.poseidon.sponge import PoseidonSponge, crh_evaluate
from sigmabus.poseidon.constraints import PoseidonSpongeVar, crh_gadget_evaluate

__all__ = [
    "PoseidonConfig",
    "poseidon_test_config",
    "PoseidonSponge",
    "crh_evaluate",
    "PoseidonSpongeVar",
    "crh_gadget_evaluate",
]
