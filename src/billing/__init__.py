"""Subscription billing: checkout, renewal and capture charges."""
