# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Cognito generation runtime.

Subsystems:
  - api: response and stream chunk dataclasses
  - generation: repetition penalty, temperature and token selection
  - streaming: per-token chunk emitter
  - engine: ReasoningAgent session and decode loop
  - loader: builds a session from config and a checkpoint
"""
