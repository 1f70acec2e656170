import logging
import secrets
from pathlib import Path
from typing import Any, Dict, List
import argparse
import sys

from config.config import ProtocolConfig, load_config
from utils.utils import setup_logging, save_results, PerformanceMonitor, create_performance_report
from x402_protocol import PrivateTransaction, X402Protocol

logger = logging.getLogger(__name__)


class PaymentDemo:
    def __init__(self, config: ProtocolConfig):
        self.config = config
        self.protocol = X402Protocol(config)
        self.performance_monitor = PerformanceMonitor()
        self.results: Dict[str, Any] = {
            'transactions': [],
            'batch': None,
            'integrity_checks': {}
        }

        logger.info("Initialized x402 payment demo")

    def process_payment(self, from_address: str, to_address: str, amount: int, secret: str) -> PrivateTransaction:
        with self.performance_monitor.start_operation("create_private_transaction"):
            tx = self.protocol.create_private_transaction(
                from_address, to_address, amount, secret)

        with self.performance_monitor.start_operation("verify_private_transaction"):
            verified = self.protocol.verify_private_transaction(tx)

        if not verified:
            raise ValueError(f"Proof verification failed for payment from {from_address}")

        with self.performance_monitor.start_operation("decrypt_amount"):
            recovered = self.protocol.decrypt_transaction_amount(tx.encrypted_amount, secret)

        self.results['transactions'].append({
            'transaction': tx.to_dict(),
            'verified': verified,
            'amount_recovered': recovered == amount
        })
        return tx

    def run(self, num_payments: int) -> Dict[str, Any]:
        transactions: List[PrivateTransaction] = []
        for i in range(num_payments):
            sender = "0x" + secrets.token_hex(20)
            recipient = "0x" + secrets.token_hex(20)
            transactions.append(self.process_payment(
                sender, recipient, 100 * (i + 1), secrets.token_hex(16)))

        with self.performance_monitor.start_operation("batch_transactions"):
            batch = self.protocol.batch_transactions(transactions)

        self.results['batch'] = batch.to_dict()
        checks = self.results['integrity_checks']
        checks['all_proofs_valid'] = all(t['verified'] for t in self.results['transactions'])
        checks['all_amounts_recovered'] = all(
            t['amount_recovered'] for t in self.results['transactions'])
        checks['batch_valid'] = self.protocol.verify_batch(batch, transactions)
        checks['no_nullifier_reuse'] = len({tx.nullifier for tx in transactions}) == len(transactions)

        return self.results


def run_demo(num_payments: int, config: ProtocolConfig) -> bool:
    print("=" * 80)
    print("X402 PRIVATE PAYMENT CORE - DEMONSTRATION")
    print("=" * 80)

    demo = PaymentDemo(config)

    try:
        results = demo.run(num_payments)
    except Exception as e:
        logger.error(f"Demo failed: {e}", exc_info=True)
        return False

    print(f"\nBatch root: {results['batch']['batchRoot']}")
    print("\nIntegrity Checks:")
    for check, passed in results['integrity_checks'].items():
        status = " PASSED" if passed else " FAILED"
        print(f"  {check}: {status}")

    if config.enable_benchmarking:
        report_path = config.results_dir / "demo_report.json"
        save_results(results, report_path)
        perf_report = create_performance_report(demo.performance_monitor)
        with open(config.results_dir / "performance_report.txt", "w") as f:
            f.write(perf_report)
        print(f"\nFull results saved to: {report_path}")

    return all(results['integrity_checks'].values())


def main():
    parser = argparse.ArgumentParser(
        description='x402 private payment core demo')
    parser.add_argument('--payments', type=int, default=3,
                        help='Number of payments to create and batch')
    parser.add_argument('--config', type=str,
                        default='config.yaml', help='Config file path')
    parser.add_argument('--benchmark', action='store_true',
                        help='Write results and a performance report')

    args = parser.parse_args()

    config = load_config(Path(args.config))
    if args.benchmark:
        config.enable_benchmarking = True

    setup_logging(config.log_level, config.log_dir / "x402_demo.log")

    success = run_demo(args.payments, config)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
