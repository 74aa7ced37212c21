"""Node configuration, interfaces, the remote client and pagination helpers."""