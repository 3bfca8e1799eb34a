# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Cognito training infrastructure package.

Subsystems:
  - objectives: masked next-token cross-entropy
  - optimizer: AdamW factory
  - checkpoint: atomic checkpoint save/load under a fixed name
  - metrics: structured training metrics
  - engine: training loop
"""
