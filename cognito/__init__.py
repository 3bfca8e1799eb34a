# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Cognito: a decoder-only transformer language model with training and interactive generation."""

__version__ = "0.1.0"
