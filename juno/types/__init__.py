"""Chain data types, addresses, events, genesis and environment helpers."""