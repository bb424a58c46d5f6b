"""Ledger, classification, budget, insight and access-control services"""
