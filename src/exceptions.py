class BPoolClientError(Exception):
    pass


class NoAccountAvailable(BPoolClientError):
    pass


class TransactionFailed(BPoolClientError):
    def __init__(self, tx_hash: str, receipt: dict = None):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f'Transaction {tx_hash} reverted')


class TransactionTimeout(BPoolClientError):
    def __init__(self, tx_hash: str, n_blocks: int):
        self.tx_hash = tx_hash
        self.n_blocks = n_blocks
        super().__init__(f'Transaction {tx_hash} not found after {n_blocks} blocks')


class ShuttingDown(BPoolClientError):
    pass
