"""Type registry with JSON and protobuf serdes."""