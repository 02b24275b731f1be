"""Test support: fakes, fault injection and sqlite row builders."""
