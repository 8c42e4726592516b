"""Redirect signal core: context, config, logging and the digest protocol."""
