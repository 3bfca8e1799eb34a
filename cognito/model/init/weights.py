# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Deterministic weight initialization for Cognito.

All initialization uses a single torch.Generator seeded from the config, so
two models built from the same config start from identical parameters
regardless of the global RNG state.
"""

import torch
import torch.nn as nn


def init_weights(module: nn.Module, seed: int, init_std: float = 0.02) -> None:
    """
    Initialize all parameters in a module deterministically.

    Matrices (linear weights and embedding tables) get a normal draw with
    standard deviation `init_std`, norm scales are set to 1.0 and biases to
    0.0. Parameters are visited in registration order, which is fixed by the
    module structure.

    Args:
        module: The nn.Module to initialize.
        seed: Random seed for the Generator.
        init_std: Standard deviation for normal initialization.
    """
    generator = torch.Generator()
    generator.manual_seed(seed)

    with torch.no_grad():
        for name, param in module.named_parameters():
            if param.dim() >= 2:
                # Draw on CPU so the values don't depend on the device
                values = torch.empty(param.shape, dtype=param.dtype)
                values.normal_(0.0, init_std, generator=generator)
                param.copy_(values)
            elif name.endswith("bias"):
                param.zero_()
            else:
                param.fill_(1.0)
