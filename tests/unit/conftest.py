"""
Unit test fixtures. Engine tests use the in-memory content source from the root
conftest; nothing here touches the network.
"""
