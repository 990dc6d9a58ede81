"""RingCentral fax bridge package."""
