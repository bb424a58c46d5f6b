"""Command parsing, handlers, reply texts and report rendering"""
