# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Configuration schema, loader and exceptions."""
