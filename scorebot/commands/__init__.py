"""Command plugins, discovered by the plugin loader"""
