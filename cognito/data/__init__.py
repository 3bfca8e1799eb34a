# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Cognito data package.

Subsystems:
  - dataset: newline-delimited text file with a minimum line length filter
  - batcher: lines -> padded (inputs, targets) tensors
  - loader: shuffled, batched, optionally prefetching iteration
"""
