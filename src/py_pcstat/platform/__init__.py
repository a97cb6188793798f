"""Platform capabilities — page residency and block device size queries.

Re-exports public symbols so callers can write::

    from py_pcstat.platform import default_residency_provider, ResidencyReport
"""

from py_pcstat.platform.devsize import (
    DarwinBlockDeviceSize,
    DeviceSizeQuery,
    LinuxBlockDeviceSize,
    UnsupportedDeviceSize,
    default_device_size_query,
)
from py_pcstat.platform.residency import (
    PAGE_SIZE,
    MincoreResidency,
    ResidencyProvider,
    ResidencyReport,
    UnsupportedResidency,
    count_resident,
    default_residency_provider,
    page_count,
)

__all__ = [
    "PAGE_SIZE",
    "DarwinBlockDeviceSize",
    "DeviceSizeQuery",
    "LinuxBlockDeviceSize",
    "MincoreResidency",
    "ResidencyProvider",
    "ResidencyReport",
    "UnsupportedDeviceSize",
    "UnsupportedResidency",
    "count_resident",
    "default_device_size_query",
    "default_residency_provider",
    "page_count",
]
