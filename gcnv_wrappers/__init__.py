"""Low-level building blocks for the germline CNV calling front-end"""
