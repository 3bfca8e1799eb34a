# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Thin wrappers around the HuggingFace tokenizers library."""
