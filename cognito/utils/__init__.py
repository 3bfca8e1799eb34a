# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Small filesystem and hashing helpers shared across subsystems."""
