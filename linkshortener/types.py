from typing import Any


# Type aliases for AWS Lambda payloads
type LambdaEvent = dict[str, Any]
type LambdaContext = Any
type LambdaResponse = dict[str, Any]
type LambdaConfiguration = dict[str, Any]

# Type aliases for parsed request bodies
type JsonBody = dict[str, Any]
