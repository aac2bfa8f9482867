# oidfed

Data model and metadata policy engine for OpenID Federation, in pure Python
with no runtime dependencies.

## What it covers

- `oidfed.entity_identifier`: `validate_entity_identifier` checks that an
  entity identifier is an `https` URL with a host and no query or fragment,
  and returns it as an `EntityIdentifier` (a `str` subclass);
  `verify_federation_endpoint` checks an optional endpoint URL for the
  `https` scheme and the absence of a fragment. Both raise `ValueError`.
- `oidfed.entity_metadata`: `FederationMetadata`,
  `OpenIDRelyingPartyMetadata` and `OpenIDProviderMetadata` are `dict`
  subclasses whose `verify_metadata()` raises `MetadataError` when required
  claims are missing or federation endpoints are invalid. Empty metadata is
  always accepted.
- The metadata policy operators, all subclasses of
  `oidfed.policy_operator.PolicyOperator`, each with `resolve`, `merge`,
  `to_slice` and `check_for_conflict`:
  `Value` (`oidfed.value`), `Add` (`oidfed.add`), `Default`
  (`oidfed.default`), `OneOf` (`oidfed.one_of`), `SubsetOf`
  (`oidfed.subset_of`), `SupersetOf` (`oidfed.superset_of`) and `Essential`
  (`oidfed.essential`). Failures raise `PolicyError`, a `ValueError`.
- `oidfed.policy_operators`: `PolicyOperators` holds the operators set for one
  metadata parameter, with `from_json` and `to_json`;
  `parse_policy_operator(key, value)` builds a single operator by name.
- `oidfed.model`: `EntityStatement`, `Metadata` and `MetadataPolicy`, each with
  `from_json` (JSON text, bytes or an already decoded dict) and `to_json`
  (a JSON-ready dict), plus the response records `ResolveResponse`,
  `TrustMarkStatusResponse`, `ExtendedListingResponse`,
  `SubordinateStatusEvent`, `SubordinateStatusResponse` and `TrustMarkHolder`.
  `EntityStatement.from_json` requires `iss`, `sub`, `iat`, `exp` and `jwks`,
  validates `authority_hints`, and rejects statements whose `exp` has passed.
- `oidfed.policy`: `process_and_extract_policy` merges the metadata policies
  along a trust chain, `merge_policy_operators` merges two operator sets for
  one parameter, `sort_by_priority` orders operators for application,
  `apply_policy` returns a copy of an entity statement with a policy applied
  to its metadata, and `calculate_chain_expiration` returns the earliest
  `exp` in a chain.
- `oidfed.server_config`: configuration records for a federation server —
  `ServerConfiguration`, `IntermediateConfiguration`,
  `SubordinateConfiguration`, `SignerConfiguration`, `Extensions` and the
  extension settings — and the abstract retriever interfaces `Retriever`,
  `TrustMarkIssuerRetriever`, `TrustMarkRetriever`,
  `ExtendedListingRetriever` and `SubordinateStatusRetriever`.
  `ServerConfiguration.get_subordinate` serves subordinates from a cache
  while they are fresh, asks the metadata retriever otherwise, and raises
  `SubordinateNotFoundError` when there is none.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

Validate an entity identifier:

```python
from oidfed.entity_identifier import validate_entity_identifier

identifier = validate_entity_identifier("https://op.example.com")
```

Work with a single policy operator:

```python
from oidfed.subset_of import SubsetOf

operator = SubsetOf(["RS256", "ES256", "ES384"])
operator.resolve(["ES256", "PS256"])               # ["ES256"]
operator.merge(["ES256", "ES512"]).operator_value  # ["ES256"]
```

Parse policies, merge them along a trust chain and apply the result:

```python
from oidfed.model import EntityStatement, MetadataPolicy
from oidfed.policy import apply_policy, process_and_extract_policy

leaf = EntityStatement.from_json(leaf_statement_json)
intermediate = EntityStatement(metadata_policy=MetadataPolicy.from_json(intermediate_policy))
anchor = EntityStatement(metadata_policy=MetadataPolicy.from_json(anchor_policy))

policy = process_and_extract_policy([leaf, intermediate, anchor])
resolved = apply_policy(leaf, policy)
```

Merging raises `PolicyError` when two policies cannot be combined, and
resolution raises it when metadata does not satisfy a policy. When policies
along a chain are merged, only parameters already named by the accumulated
policy are merged with the next one. The `scope` claim of a relying party is
treated as a space separated list while policies are applied and written back
as a string afterwards.

## What it does not do

The package is a data model and policy engine only. It does not sign or
verify entity statements or JWTs, does not fetch statements over the network,
and does not run federation endpoints. The server configuration objects hold
settings and cached subordinates; the signer, HTTP client and retrievers they
refer to must be supplied by the caller.