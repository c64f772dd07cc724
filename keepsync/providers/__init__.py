# importing registers, order here is the order providers are driven in
from .yandex import YandexDiskProvider
from .gdrive import GDriveProvider, GDriveProfile
