# Overview: pydantic request schemas, one module per API area.
