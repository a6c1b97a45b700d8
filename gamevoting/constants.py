#
# Networks
#

LOCAL_NETWORKS = ["local", "development"]

#
# Environment
#

ACCOUNT_ENVVAR = "DEPLOYER_ACCOUNT"
NETWORK_ENVVAR = "NETWORK"
ADMIN_ADDRESS_ENVVAR = "ADMIN_CONTRACT_ADDRESS"

#
# Contracts
#

IMPLEMENTATION_CONTRACT = "GameVoting"
ADMIN_CONTRACT = "GameVotingAdmin"
PROXY_CONTRACT = "GameVotingProxy"

# GameVotingAdmin ABI
CREATE_PROXY_METHOD = "deployProxy"
UPGRADE_METHOD = "upgrade"
PROXY_GETTER = "gameVotingProxy"
OWNER_GETTER = "owner"

# EIP1967 Implementation slot - https://eips.ethereum.org/EIPS/eip-1967#logic-contract-address
EIP1967_IMPLEMENTATION_SLOT = 0x360894A13BA1A3210667C828492DB98DCA3E2076CC3735A920A3CA505D382BBC

ZERO_ADDRESS = "0x" + "0" * 40
