from suimev import link

TX = "WQ346mGc8sLjtcBPBfJNvTxCWar7U7Fsow9rTkmXgyE"
OBJ = "0xb8d7d9e66a60c239e7a60110efcf8de6c705580ed924d0dde141f4a0e2c90105"
ACCOUNT = "0xac5bceec1b789ff840d7d4e6ce4ce61c90d190a7f8c4f4ddf0bff6ee2413c33c"
COIN = "0xa8816d3a6e3136e86bc2873b1f94a15cadc8af2703c075f2d546c2ae367f4df9::ocean::OCEAN"
CHECKPOINT = "AYWtSh7XWdBiRaEyh4oq3pxoaPmLkPJ6U1LBdwHuEXT"


def test_tx_without_tag():
    assert link.tx(TX) == f"[{TX}](https://suiscan.xyz/mainnet/tx/{TX})"


def test_tx_with_tag():
    assert link.tx(TX, "bid") == f"[bid](https://suiscan.xyz/mainnet/tx/{TX})"


def test_empty_tag_is_kept():
    assert link.tx(TX, "").startswith("[](")


def test_object():
    assert link.object(OBJ) == f"[{OBJ}](https://suiscan.xyz/mainnet/object/{OBJ})"


def test_account():
    assert link.account(ACCOUNT, "me") == f"[me](https://suiscan.xyz/mainnet/account/{ACCOUNT}/portfolio)"


def test_coin():
    assert link.coin(COIN) == f"[{COIN}](https://suiscan.xyz/mainnet/coin/{COIN}/txs)"
    assert link.coin(COIN, "OCEAN") == f"[OCEAN](https://suiscan.xyz/mainnet/coin/{COIN}/txs)"


def test_checkpoint():
    assert link.checkpoint(CHECKPOINT, 42) == f"[42](https://suiscan.xyz/mainnet/checkpoint/{CHECKPOINT})"