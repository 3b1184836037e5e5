"""Test suite for commitcache."""
