"""Shared fixtures for apisnip tests."""

import copy

import pytest

from apisnip.document import load

PETSTORE = {
    'openapi': '3.0.3',
    'info': {'title': 'Petstore', 'version': '1.0.0'},
    'servers': [{'url': 'https://petstore.example.com/v1'}],
    'security': [{'apiKey': []}],
    'tags': [
        {'name': 'pets', 'description': 'Everything about pets'},
        {'name': 'store', 'description': 'Orders'},
        {'name': 'admin'},
    ],
    'paths': {
        '/pets': {
            'summary': 'Pet collection',
            'parameters': [{'$ref': '#/components/parameters/TraceId'}],
            'get': {
                'summary': 'List all pets',
                'operationId': 'listPets',
                'tags': ['pets'],
                'parameters': [{'name': 'limit', 'in': 'query', 'schema': {'type': 'integer'}}],
                'responses': {
                    '200': {
                        'description': 'A paged array of pets',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/PetList'},
                            },
                        },
                    },
                    'default': {'$ref': '#/components/responses/Error'},
                },
            },
            'post': {
                'summary': 'Create a pet',
                'operationId': 'createPet',
                'tags': ['pets'],
                'requestBody': {
                    'content': {
                        'application/json': {
                            'schema': {'$ref': '#/components/schemas/Pet'},
                        },
                    },
                },
                'responses': {'201': {'description': 'Null response'}},
            },
        },
        '/pets/{id}': {
            'get': {
                'summary': 'Info for a specific pet',
                'operationId': 'showPetById',
                'tags': ['pets'],
                'security': [{'oauth': ['read']}],
                'parameters': [{'name': 'id', 'in': 'path', 'required': True, 'schema': {'type': 'string'}}],
                'responses': {
                    '200': {
                        'description': 'Expected response to a valid request',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/PetDetail'},
                            },
                        },
                    },
                },
            },
        },
        '/store/orders': {
            'post': {
                'summary': 'Place an order',
                'description': 'Place a new order in the store',
                'tags': ['store'],
                'security': [],
                'requestBody': {'$ref': '#/components/requestBodies/Order'},
                'responses': {'200': {'description': 'ok'}},
            },
        },
    },
    'components': {
        'schemas': {
            'Tag': {
                'type': 'object',
                'properties': {'name': {'type': 'string'}},
            },
            'Pet': {
                'type': 'object',
                'required': ['name'],
                'properties': {
                    'name': {'type': 'string'},
                    'tags': {'type': 'array', 'items': {'$ref': '#/components/schemas/Tag'}},
                },
            },
            'PetList': {
                'type': 'array',
                'items': {'$ref': '#/components/schemas/Pet'},
            },
            'PetDetail': {
                'allOf': [
                    {'$ref': '#/components/schemas/Pet'},
                    {'type': 'object', 'properties': {'owner': {'$ref': '#/components/schemas/Owner'}}},
                ],
            },
            'Owner': {'type': 'object', 'properties': {'name': {'type': 'string'}}},
            'Order': {
                'type': 'object',
                'properties': {
                    'items': {'type': 'object', 'additionalProperties': {'$ref': '#/components/schemas/OrderLine'}},
                },
            },
            'OrderLine': {'type': 'object', 'properties': {'quantity': {'type': 'integer'}}},
            'Unused': {'type': 'string'},
            'Error': {
                'type': 'object',
                'properties': {'code': {'type': 'integer'}, 'message': {'type': 'string'}},
            },
        },
        'parameters': {
            'TraceId': {'name': 'X-Trace-Id', 'in': 'header', 'schema': {'type': 'string'}},
            'Unused': {'name': 'unused', 'in': 'query'},
        },
        'responses': {
            'Error': {
                'description': 'Unexpected error',
                'headers': {'X-Rate-Limit': {'$ref': '#/components/headers/RateLimit'}},
                'content': {
                    'application/json': {
                        'schema': {'$ref': '#/components/schemas/Error'},
                        'examples': {'basic': {'$ref': '#/components/examples/ErrorExample'}},
                    },
                },
            },
        },
        'headers': {
            'RateLimit': {'schema': {'type': 'integer'}},
        },
        'examples': {
            'ErrorExample': {'value': {'code': 500, 'message': 'boom'}},
        },
        'requestBodies': {
            'Order': {
                'content': {
                    'application/json': {'schema': {'$ref': '#/components/schemas/Order'}},
                },
            },
        },
        'securitySchemes': {
            'apiKey': {'type': 'apiKey', 'in': 'header', 'name': 'X-API-Key'},
            'oauth': {
                'type': 'oauth2',
                'flows': {'implicit': {'authorizationUrl': 'https://example.com/auth', 'scopes': {'read': 'Read'}}},
            },
            'basic': {'type': 'http', 'scheme': 'basic'},
        },
        'x-internal': {'owner': 'platform'},
    },
    'x-generator': 'handwritten',
}


@pytest.fixture
def petstore_raw():
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def petstore(petstore_raw):
    return load(petstore_raw)


@pytest.fixture
def tree_schema_doc():
    """Document whose Node schema references itself through an array."""
    return load({
        'openapi': '3.1.0',
        'info': {'title': 'Trees', 'version': '1'},
        'paths': {
            '/nodes': {
                'get': {
                    'responses': {
                        '200': {
                            'description': 'ok',
                            'content': {'application/json': {'schema': {'$ref': '#/components/schemas/Node'}}},
                        },
                    },
                },
            },
        },
        'components': {
            'schemas': {
                'Node': {
                    'type': 'object',
                    'properties': {
                        'children': {'type': 'array', 'items': {'$ref': '#/components/schemas/Node'}},
                        'parent': {'$ref': '#/components/schemas/Link'},
                    },
                },
                'Link': {'type': 'object', 'properties': {'target': {'$ref': '#/components/schemas/Node'}}},
            },
        },
    })
