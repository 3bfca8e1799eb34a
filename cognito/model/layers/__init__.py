# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Reusable building blocks shared by the block and the model head."""

from cognito.model.layers.rmsnorm import RMSNorm

__all__ = ["RMSNorm"]
