"""Vendor session implementations.

Importing this package triggers vendor registration via @register_vendor.
"""

import vlsrctl.switchctrl.vendors.dell  # noqa: F401
import vlsrctl.switchctrl.vendors.juniper  # noqa: F401
