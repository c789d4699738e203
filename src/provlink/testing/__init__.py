"""Test doubles for station software built on provlink."""

from provlink.testing.fake import FakeProvisioningApplianceStub, FakeRpcError, RecordedCall

__all__ = ["FakeProvisioningApplianceStub", "FakeRpcError", "RecordedCall"]
