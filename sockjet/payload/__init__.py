"""Polling payload format: errors, length headers, codecs, pauser and exchange."""