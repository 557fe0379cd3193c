"""OpenPGP helpers: sync settings, key changes, raw packets, digests and index formatting."""