import os
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor

import pytest

from base2n import (
    ALPHABET_ALPHA,
    ALPHABET_NUM,
    ALPHABET_SYM_BASE64,
    ALPHABET_SYM_BASE64_PHP,
    DEFAULT_ALPHABET,
    PAD_GROUP_BYTES,
    AlphabetSizeError,
    Configuration,
    ConfigurationError,
    DecodeError,
    DuplicateSymbolError,
    Encoding,
    FastPath,
    InvalidBitWidthError,
    NativeSupportError,
    PadCharacterError,
    Scheme,
    TranslateError,
    UnknownSchemeError,
    bytesPerGroup,
    decode,
    encode,
    factory,
    maxBitsFor,
    symbolsPerGroup,
)
from base2n.__main__ import main


BASE32_CHARS = ALPHABET_ALPHA + "234567"
BASE64_CHARS = ALPHABET_ALPHA + ALPHABET_ALPHA.lower() + ALPHABET_NUM
SAMPLE = bytes(range(256)) + b"encode this"


# ── Group arithmetic ───────────────────────────────────────────────


class TestGroupArithmetic:
    def test_bytes_per_group_matches_table(self):
        for bits in range(1, 9):
            assert bytesPerGroup(bits) == PAD_GROUP_BYTES[bits]

    def test_symbols_per_group(self):
        expected = {1: 8, 2: 4, 3: 8, 4: 2, 5: 8, 6: 4, 7: 8, 8: 1}
        for bits in range(1, 9):
            assert symbolsPerGroup(bits) == expected[bits]

    def test_group_is_whole_bytes_and_symbols(self):
        for bits in range(1, 9):
            assert bytesPerGroup(bits) * 8 == symbolsPerGroup(bits) * bits

    def test_max_bits_for(self):
        assert maxBitsFor(2) == 1
        assert maxBitsFor(3) == 1
        assert maxBitsFor(16) == 4
        assert maxBitsFor(31) == 4
        assert maxBitsFor(64) == 6
        assert maxBitsFor(256) == 8
        assert maxBitsFor(5000) == 8


# ── Configuration ──────────────────────────────────────────────────


class TestConfiguration:
    def test_alphabet_too_small_reports_max_bits(self):
        with pytest.raises(AlphabetSizeError) as info:
            Configuration(5, "0123456789abcdef")
        assert info.value.maxBits == 4
        assert "can not be more than 4" in str(info.value)
        assert "max radix 16" in str(info.value)

    def test_alphabet_too_small_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            Configuration(5, "0123456789abcdef")

    def test_alphabet_too_large(self):
        with pytest.raises(AlphabetSizeError) as info:
            Configuration(1, "012")
        assert info.value.maxBits is None

    def test_alphabet_too_short_to_use(self):
        with pytest.raises(AlphabetSizeError):
            Configuration(1, "a")
        with pytest.raises(AlphabetSizeError):
            Configuration(1, b"01")

    def test_bits_below_one(self):
        with pytest.raises(InvalidBitWidthError):
            Configuration(0)
        with pytest.raises(InvalidBitWidthError):
            Configuration(-3, "01")

    def test_bits_above_eight(self):
        chars = "".join(chr(0x100 + i) for i in range(512))
        with pytest.raises(InvalidBitWidthError):
            Configuration(9, chars)

    def test_bits_above_eight_with_short_alphabet(self):
        with pytest.raises(AlphabetSizeError) as info:
            Configuration(9)
        assert info.value.maxBits == 6

    def test_bits_not_an_integer(self):
        with pytest.raises(InvalidBitWidthError):
            Configuration("5", BASE32_CHARS)
        with pytest.raises(InvalidBitWidthError):
            Configuration(True, "01")

    def test_duplicate_symbols(self):
        with pytest.raises(DuplicateSymbolError):
            Configuration(1, "aa")
        with pytest.raises(DuplicateSymbolError):
            Configuration(2, "abcb")

    def test_mixed_case_alphabet_allowed_case_insensitive(self):
        config = Configuration(2, "aAbB", caseSensitive=False)
        assert config.alphabet == "aAbB"

    def test_pad_character_in_alphabet(self):
        with pytest.raises(PadCharacterError):
            Configuration(1, "01", padFinalGroup=True, padCharacter="0")

    def test_pad_character_case_insensitive_collision(self):
        with pytest.raises(PadCharacterError):
            Configuration(
                1, "ab", caseSensitive=False, padFinalGroup=True, padCharacter="A"
            )
        config = Configuration(1, "ab", padFinalGroup=True, padCharacter="A")
        assert config.padCharacter == "A"

    def test_pad_character_must_be_one_character(self):
        with pytest.raises(PadCharacterError):
            Configuration(1, "01", padFinalGroup=True, padCharacter="==")
        with pytest.raises(PadCharacterError):
            Configuration(1, "01", padFinalGroup=True, padCharacter=None)

    def test_pad_character_ignored_without_padding(self):
        config = Configuration(1, "01", padCharacter="0")
        assert not config.padFinalGroup

    def test_translate_lengths_must_match(self):
        with pytest.raises(TranslateError):
            Configuration(5, BASE32_CHARS, translate=("01", "O"))
        with pytest.raises(TranslateError):
            Configuration(5, BASE32_CHARS, translate="ab")

    def test_native_unsupported_width(self):
        with pytest.raises(NativeSupportError):
            Configuration(5, native=True)

    def test_native_base64_requires_right_pad(self):
        with pytest.raises(NativeSupportError):
            Configuration(6, native=True)

    def test_native_alphabet_mismatch(self):
        with pytest.raises(NativeSupportError):
            Configuration(4, "0123456789ABCDEF", native=True)

    def test_native_alphabet_derived(self):
        assert Configuration(4, native=True).alphabet == "0123456789abcdef"
        config = Configuration(
            6,
            rightPadFinalBits=True,
            translate=(ALPHABET_SYM_BASE64, ALPHABET_SYM_BASE64_PHP),
            native=True,
        )
        assert config.alphabet == BASE64_CHARS + "-,"
        assert config.fastPath is FastPath.BASE64

    def test_default_alphabet(self):
        assert Configuration(4).alphabet == "0123456789abcdef"
        assert Configuration(6).alphabet == DEFAULT_ALPHABET
        assert Configuration(1).radix == 2

    def test_generic_fast_path_is_none(self):
        assert Configuration(6).fastPath is FastPath.NONE

    def test_immutable(self):
        config = Configuration(4)
        with pytest.raises(AttributeError):
            config.alphabet = "fedcba9876543210"
        with pytest.raises(AttributeError):
            del config.bitsPerSymbol
        assert config.alphabet == "0123456789abcdef"

    def test_errors_are_value_errors(self):
        for cls in (ConfigurationError, DecodeError, UnknownSchemeError):
            assert issubclass(cls, ValueError)

    def test_symbol_to_value(self):
        config = Configuration(2, "wxyz")
        assert config.symbolToValue == {"w": 0, "x": 1, "y": 2, "z": 3}
        assert config.symbolToValue is config.symbolToValue

    def test_repr(self):
        assert "Configuration(5, " in repr(factory(Scheme.BASE32))
        assert "native=True" in repr(factory(Scheme.BASE64))


# ── Encoding ───────────────────────────────────────────────────────


class TestEncode:
    def test_base32(self):
        assert factory(Scheme.BASE32).encode(b"encode this") == "MVXGG33EMUQHI2DJOM======"

    def test_base32_hex(self):
        config = factory(Scheme.BASE32_HEX)
        assert config.encode(b"encode this") == "CLN66RR4CKG78Q39EC======"

    def test_octal(self):
        config = factory(Scheme.OCT)
        assert config.encode(b"encode this") == "312671433366214510072150322711"

    def test_binary(self):
        assert factory(Scheme.BIN).encode(b"encode this") == (
            "0110010101101110011000110110111101100100011001010010000001110100"
            "011010000110100101110011"
        )

    def test_empty(self):
        for scheme in Scheme:
            assert factory(scheme).encode(b"") == ""

    def test_right_pad_final_bits(self):
        # "f" = 01100|110: the leftover 110 becomes 11000 or stays 00110
        padded = Configuration(5, BASE32_CHARS, rightPadFinalBits=True)
        unpadded = Configuration(5, BASE32_CHARS, rightPadFinalBits=False)
        assert padded.encode(b"f") == "MY"
        assert unpadded.encode(b"f") == "MG"

    def test_custom_pad_character(self):
        config = Configuration(
            5, BASE32_CHARS, rightPadFinalBits=True, padFinalGroup=True, padCharacter="*"
        )
        assert config.encode(b"f") == "MY******"
        assert config.encode(b"fooba") == "MZXW6YTB"

    def test_padding_for_odd_widths(self):
        config = Configuration(3, "01234567", padFinalGroup=True)
        # one byte: 3 symbols of an 8-symbol group
        assert config.encode(b"\xff") == "773====="
        chars = "".join(chr(0x100 + i) for i in range(128))
        config = Configuration(7, chars, padFinalGroup=True)
        assert config.encode(b"\x00") == chr(0x100) * 2 + "=" * 6

    def test_eight_bit(self):
        chars = "".join(chr(0x100 + i) for i in range(256))
        config = Configuration(8, chars)
        assert config.encode(b"\x00\x01\xff") == chr(0x100) + chr(0x101) + chr(0x1FF)
        assert config.decode(chr(0x1FF) + chr(0x100), strict=True) == b"\xff\x00"

    def test_module_function(self):
        config = factory(Scheme.BASE64)
        assert encode(b"foo", config) == config.encode(b"foo") == "Zm9v"

    def test_bytes_like(self):
        config = factory(Scheme.BASE32)
        assert config.encode(bytearray(b"foo")) == "MZXW6==="
        assert config.encode(memoryview(b"foo")) == "MZXW6==="

    def test_str_rejected(self):
        with pytest.raises(TypeError):
            factory(Scheme.BASE64).encode("foo")
        with pytest.raises(TypeError):
            factory(Scheme.BASE64).encode(3)

    def test_deterministic(self):
        config = factory(Scheme.BASE32_CROCKFORD)
        assert config.encode(SAMPLE) == config.encode(SAMPLE)


RFC_4648_VECTORS = [
    (b"", "", "", "", ""),
    (b"f", "66", "MY======", "CO======", "Zg=="),
    (b"fo", "666f", "MZXQ====", "CPNG====", "Zm8="),
    (b"foo", "666f6f", "MZXW6===", "CPNMU===", "Zm9v"),
    (b"foob", "666f6f62", "MZXW6YQ=", "CPNMUOG=", "Zm9vYg=="),
    (b"fooba", "666f6f6261", "MZXW6YTB", "CPNMUOJ1", "Zm9vYmE="),
    (b"foobar", "666f6f626172", "MZXW6YTBOI======", "CPNMUOJ1E8======", "Zm9vYmFy"),
]


class TestRFC4648:
    @pytest.mark.parametrize("raw, b16, b32, b32hex, b64", RFC_4648_VECTORS)
    def test_encode(self, raw, b16, b32, b32hex, b64):
        assert factory(Scheme.BASE16).encode(raw) == b16
        assert factory(Scheme.BASE32).encode(raw) == b32
        assert factory(Scheme.BASE32_HEX).encode(raw) == b32hex
        assert factory(Scheme.BASE64).encode(raw) == b64

    @pytest.mark.parametrize("raw, b16, b32, b32hex, b64", RFC_4648_VECTORS)
    def test_decode(self, raw, b16, b32, b32hex, b64):
        assert factory(Scheme.BASE16).decode(b16.upper(), strict=True) == raw
        assert factory(Scheme.BASE32).decode(b32, strict=True) == raw
        assert factory(Scheme.BASE32_HEX).decode(b32hex, strict=True) == raw
        assert factory(Scheme.BASE64).decode(b64, strict=True) == raw


# ── Decoding ───────────────────────────────────────────────────────


class TestDecode:
    def test_binary(self):
        config = factory(Scheme.BIN)
        assert config.decode(config.encode(b"encode this")) == b"encode this"

    def test_octal(self):
        assert factory(Scheme.OCT).decode("312671433366214510072150322711") == (
            b"encode this"
        )

    def test_empty(self):
        for scheme in Scheme:
            assert factory(scheme).decode("") == b""
            assert factory(scheme).decode("", strict=True) == b""

    def test_only_padding(self):
        assert factory(Scheme.BASE32).decode("========") == b""
        assert factory(Scheme.BASE64).decode("==", strict=True) == b""

    def test_strict_failure(self):
        with pytest.raises(DecodeError) as info:
            factory(Scheme.BIN).decode("0110010101101110x", strict=True)
        assert info.value.character == "x"
        assert info.value.position == 16

    def test_lenient_skips(self):
        assert factory(Scheme.BIN).decode("01100101x01101110") == b"en"
        assert factory(Scheme.BASE32).decode("MZXW 6YQ=") == b"foob"

    def test_case_insensitive(self):
        config = Configuration(5, BASE32_CHARS, False, True, True)
        encoded = config.encode(b"encode this")
        assert config.decode(encoded.lower()) == b"encode this"
        assert config.decode(encoded.upper()) == b"encode this"
        assert config.decode(encoded.swapcase(), strict=True) == b"encode this"

    def test_case_fold_is_memoized(self):
        config = Configuration(5, BASE32_CHARS, caseSensitive=False)
        assert "m" not in config.symbolToValue
        config.decode("my")
        assert config.symbolToValue["m"] == config.symbolToValue["M"]
        assert config.symbolToValue["y"] == config.symbolToValue["Y"]

    def test_lowercase_only_alphabet_decodes_uppercase(self):
        config = Configuration(4, "0123456789abcdef", caseSensitive=False)
        assert config.decode("DEADBEEF", strict=True) == b"\xde\xad\xbe\xef"

    def test_case_sensitive(self):
        config = Configuration(4, "0123456789abcdef")
        with pytest.raises(DecodeError):
            config.decode("AB", strict=True)
        assert config.decode("AB") == b""

    def test_case_fold_is_ascii_only(self):
        config = Configuration(5, BASE32_CHARS, False, True, True)
        with pytest.raises(DecodeError):
            config.decode("ſı", strict=True)
        assert config.decode("ſı") == b""
        assert "ſ" not in config.symbolToValue
        assert "ı" not in config.symbolToValue

    def test_right_pad_false_final_symbol(self):
        config = Configuration(5, BASE32_CHARS, rightPadFinalBits=False)
        assert config.decode("MG") == b"f"
        assert config.decode(config.encode(b"fo")) == b"fo"

    def test_dangling_bits_dropped(self):
        assert factory(Scheme.BASE32).decode("MYA") == b"f"
        assert factory(Scheme.HEX).decode("666f6") == b"fo"

    def test_module_function(self):
        assert decode("Zm9v", factory(Scheme.BASE64)) == b"foo"

    def test_bytes_input(self):
        assert factory(Scheme.BASE64).decode(b"Zm9vYmFy") == b"foobar"
        assert factory(Scheme.BASE32).decode(bytearray(b"MZXW6===")) == b"foo"

    def test_php_session_base32(self):
        config = factory(Scheme.BASE32_HEX)
        assert len(config.decode("q3c8n4vqpq11i0vr6ucmafg1h3")) == 16

    def test_php_session_base64(self):
        config = Configuration(
            6,
            None,
            True,
            True,
            False,
            None,
            (ALPHABET_SYM_BASE64, ALPHABET_SYM_BASE64_PHP),
            native=True,
        )
        raw = config.decode("7Hf91mVc,q-9W1VndNNh3evVN83", strict=True)
        assert len(raw) == 20
        assert config.encode(raw)[:26] == "7Hf91mVc,q-9W1VndNNh3evVN8"

    @pytest.mark.parametrize("bits", range(1, 9))
    def test_every_width(self, bits):
        chars = "".join(chr(0x100 + i) for i in range(1 << bits))
        for rightPad in (False, True):
            config = Configuration(bits, chars, rightPadFinalBits=rightPad, padFinalGroup=True)
            for n in range(0, 10):
                data = SAMPLE[n * 7 : n * 8]
                assert config.decode(config.encode(data), strict=True) == data


# ── Fast path ──────────────────────────────────────────────────────


class TestFastPath:
    def test_scheme_fast_paths(self):
        assert factory(Scheme.HEX).fastPath is FastPath.HEX
        assert factory(Scheme.BASE64).fastPath is FastPath.BASE64
        assert factory(Scheme.BASE64_URL).fastPath is FastPath.BASE64
        assert factory(Scheme.BASE64_BCRYPT).fastPath is FastPath.BASE64
        assert factory(Scheme.BASE32).fastPath is FastPath.NONE

    @pytest.mark.parametrize(
        "scheme, generic",
        [
            (Scheme.HEX, Configuration(4, "0123456789abcdef", False)),
            (Scheme.BASE64, Configuration(6, BASE64_CHARS + "+/", True, True, True)),
            (Scheme.BASE64_URL, Configuration(6, BASE64_CHARS + "-_", True, True, False)),
            (Scheme.BASE64_BCRYPT, Configuration(6, "./" + BASE64_CHARS, True, True, False)),
        ],
    )
    def test_matches_generic(self, scheme, generic):
        native = factory(scheme)
        assert native.alphabet == generic.alphabet
        for n in range(0, 20):
            data = SAMPLE[200 : 200 + n]
            encoded = native.encode(data)
            assert encoded == generic.encode(data)
            assert native.decode(encoded, strict=True) == data
        for text in ("Zm9v!YmFy", "Zm9vY", "666f6", "Zm9v+", "ABCD==ab", "DEADbeef"):
            assert native.decode(text) == generic.decode(text)
            try:
                expected = generic.decode(text, strict=True)
            except DecodeError:
                with pytest.raises(DecodeError):
                    native.decode(text, strict=True)
            else:
                assert native.decode(text, strict=True) == expected

    def test_hex_uppercase(self):
        assert factory(Scheme.HEX).decode("DEADbeef", strict=True) == b"\xde\xad\xbe\xef"

    def test_custom_pad_character(self):
        config = Configuration(
            6, rightPadFinalBits=True, padFinalGroup=True, padCharacter="*", native=True
        )
        assert config.encode(b"f") == "Zg**"
        assert config.decode("Zg**") == b"f"

    def test_bcrypt_ordering(self):
        config = factory(Scheme.BASE64_BCRYPT)
        assert config.alphabet == "./" + BASE64_CHARS
        assert config.encode(b"\x00\x00\x00") == "...."
        assert config.encode(b"\xff\xff\xff") == "9999"

    def test_translated_hex(self):
        config = Configuration(4, native=True, translate=("abcdef", "ABCDEF"))
        assert config.alphabet == "0123456789ABCDEF"
        assert config.fastPath is FastPath.HEX
        assert config.encode(b"\xde\xad") == "DEAD"
        assert config.decode("DEAD", strict=True) == b"\xde\xad"
        with pytest.raises(DecodeError):
            config.decode("dead", strict=True)

    def test_url_safe(self):
        config = factory(Scheme.BASE64_URL)
        assert config.encode(b"\xfb\xff") == "-_8"
        assert config.decode("-_8", strict=True) == b"\xfb\xff"
        with pytest.raises(DecodeError):
            config.decode("+/8", strict=True)


# ── Schemes ────────────────────────────────────────────────────────


class TestSchemes:
    def test_aliases(self):
        assert Scheme.BASE16 is Scheme.HEX
        assert Scheme.BASE32_RFC_4648 is Scheme.BASE32
        assert Scheme.BASE64_URL_RFC_4648 is Scheme.BASE64_URL

    def test_lookup_forms(self):
        config = factory(Scheme.BASE32_HEX)
        assert factory(5) is config
        assert factory("base32-hex") is config
        assert factory("BASE32_HEX_RFC_4648") is config
        assert factory(" Base32_Hex ") is config

    def test_unknown(self):
        for scheme in ("base85", "", 0, 99, None, True, 3.0):
            with pytest.raises(UnknownSchemeError):
                factory(scheme)

    def test_alphabets(self):
        assert factory(Scheme.BIN).alphabet == "01"
        assert factory(Scheme.OCT).alphabet == "01234567"
        assert factory(Scheme.HEX).alphabet == "0123456789abcdef"
        assert factory(Scheme.BASE32).alphabet == "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
        assert factory(Scheme.BASE32_HEX).alphabet == "0123456789ABCDEFGHIJKLMNOPQRSTUV"
        assert factory(Scheme.BASE32_Z).alphabet == "ybndrfg8ejkmcpqxot1uwisza345h769"
        assert factory(Scheme.BASE32_CROCKFORD).alphabet == (
            "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
        )
        assert factory(Scheme.BASE64).alphabet == BASE64_CHARS + "+/"
        assert factory(Scheme.BASE64_URL).alphabet == BASE64_CHARS + "-_"

    def test_policies(self):
        base32 = factory(Scheme.BASE32)
        assert not base32.caseSensitive
        assert base32.rightPadFinalBits
        assert base32.padFinalGroup
        assert base32.padCharacter == "="
        assert not factory(Scheme.BASE32_Z).padFinalGroup
        assert factory(Scheme.BASE64).padFinalGroup
        assert not factory(Scheme.BASE64_URL).padFinalGroup
        assert factory(Scheme.BASE64).caseSensitive
        assert not factory(Scheme.BIN).rightPadFinalBits

    def test_z_base32(self):
        config = factory(Scheme.BASE32_Z)
        assert config.encode(b"\xf0\xbf\xc7") == "6n9hq"
        assert config.decode("6N9HQ", strict=True) == b"\xf0\xbf\xc7"

    def test_crockford(self):
        config = factory(Scheme.BASE32_CROCKFORD)
        assert config.encode(b"\x00") == "00======"
        assert config.encode(b"\x08") == "10======"
        assert config.decode("OO", strict=True) == b"\x00"
        assert config.decode("oo======", strict=True) == b"\x00"
        for alias in "IiLl":
            assert config.decode(alias + "0", strict=True) == b"\x08"

    def test_crockford_excludes_u(self):
        with pytest.raises(DecodeError):
            factory(Scheme.BASE32_CROCKFORD).decode("U0", strict=True)

    @pytest.mark.parametrize("scheme", list(Scheme))
    def test_round_trip(self, scheme):
        config = factory(scheme)
        assert config.decode(config.encode(SAMPLE), strict=True) == SAMPLE

    def test_every_scheme_builds(self):
        for scheme in Scheme:
            config = factory(scheme)
            assert isinstance(config, Configuration)
            assert factory(scheme) is config

    def test_concurrent_decode(self):
        config = Configuration(5, BASE32_CHARS, False, True, True)
        encoded = config.encode(SAMPLE).lower()
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: config.decode(encoded), range(32)))
        assert all(r == SAMPLE for r in results)


# ── Formatting helpers ─────────────────────────────────────────────


class TestFormatting:
    def setup_method(self):
        self.config = factory(Scheme.BASE64)

    def test_clean(self):
        assert self.config.clean("Zm9v\r\n Ym\tFy\0\f") == "Zm9vYmFy"

    def test_split(self):
        assert self.config.split("abcdefgh", 3) == "abc\ndef\ngh"
        assert self.config.split("abcdef", 3) == "abc\ndef"
        assert self.config.split("", 3) == ""

    def test_split_invalid_length(self):
        with pytest.raises(ValueError):
            self.config.split("abc", 0)

    def test_format(self):
        assert self.config.format("abcdef") == "abcdef"
        assert self.config.format("abcdef", 4) == "abcd\nef"

    def test_clean_then_decode(self):
        text = self.config.format(self.config.encode(SAMPLE), 76)
        assert "\n" in text
        assert self.config.decode(self.config.clean(text), strict=True) == SAMPLE

    def test_base_contract(self):
        with pytest.raises(NotImplementedError):
            Encoding().encode(b"")
        with pytest.raises(NotImplementedError):
            Encoding().decode("")


# ── CLI ────────────────────────────────────────────────────────────


class TestCLI:
    def _run(self, *args, input=""):
        result = subprocess.run(
            [sys.executable, "-m", "base2n", *args],
            capture_output=True,
            text=True,
            input=input,
            cwd=os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
        )
        return result

    def test_encode_scheme(self):
        r = self._run("--scheme", "base32", "encode this")
        assert r.returncode == 0
        assert r.stdout == "MVXGG33EMUQHI2DJOM======\n"

    def test_decode_scheme(self):
        r = self._run("-d", "--scheme", "base32", "MVXGG33EMUQHI2DJOM======")
        assert r.returncode == 0
        assert r.stdout == "encode this"

    def test_stdin_default_base64(self):
        r = self._run(input="foobar")
        assert r.returncode == 0
        assert r.stdout == "Zm9vYmFy\n"

    def test_decode_stdin_trailing_newline(self):
        r = self._run("-d", "--strict", input="Zm9vYmFy\n")
        assert r.returncode == 0
        assert r.stdout == "foobar"

    def test_strict_failure(self):
        r = self._run("-d", "--strict", "--scheme", "bin", "01x")
        assert r.returncode == 1
        assert "unable to decode" in r.stderr

    def test_unknown_scheme(self):
        r = self._run("--scheme", "base85", "x")
        assert r.returncode == 2
        assert "not a known encoding scheme" in r.stderr

    def test_bad_custom_alphabet(self):
        r = self._run("--bits", "5", "--alphabet", "0123456789abcdef", "x")
        assert r.returncode == 1
        assert "can not be more than 4" in r.stderr

    def test_alphabet_requires_bits(self):
        r = self._run("--alphabet", "01", "x")
        assert r.returncode == 2

    @pytest.mark.parametrize(
        "flags",
        [["--pad"], ["--pad", "*"], ["--right-pad"], ["--case-insensitive"]],
    )
    def test_custom_flags_require_bits(self, flags):
        r = self._run("--scheme", "base32", *flags, "x")
        assert r.returncode == 2
        assert "requires --bits" in r.stderr

    def test_bad_custom_alphabet_in_process(self, capsys):
        assert main(["--bits", "5", "--alphabet", "0123456789abcdef", "x"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("base2n: error: ")
        assert "can not be more than 4" in err

    def test_custom_bits(self):
        r = self._run("--bits", "3", "encode this")
        assert r.returncode == 0
        assert r.stdout == "312671433366214510072150322711\n"

    def test_custom_padding(self):
        r = self._run("--bits", "5", "--alphabet", BASE32_CHARS, "--right-pad", "--pad", "=", "f")
        assert r.returncode == 0
        assert r.stdout == "MY======\n"

    def test_wrap(self):
        r = self._run("--wrap", "4", "foobar")
        assert r.returncode == 0
        assert r.stdout == "Zm9v\nYmFy\n"

    def test_clean(self):
        r = self._run("-d", "--clean", "--strict", input="Zm9v\nYmFy\n")
        assert r.returncode == 0
        assert r.stdout == "foobar"

    def test_ignore_garbage(self):
        r = self._run("-d", "--ignore-garbage", "--strict", input="Zm9v\nYmFy\n")
        assert r.returncode == 0
        assert r.stdout == "foobar"

    def test_verbose(self):
        r = self._run("-v", "foobar")
        assert r.returncode == 0
        assert r.stdout == "Zm9vYmFy\n"
        assert "base2n: DEBUG: building scheme BASE64" in r.stderr

    def test_files(self, tmp_path):
        src = tmp_path / "in.bin"
        src.write_bytes(SAMPLE)
        enc = tmp_path / "out.txt"
        dec = tmp_path / "back.bin"
        r = self._run("--scheme", "base32-crockford", "-i", str(src), "-o", str(enc))
        assert r.returncode == 0
        r = self._run("-d", "--scheme", "base32-crockford", "-i", str(enc), "-o", str(dec))
        assert r.returncode == 0
        assert dec.read_bytes() == SAMPLE

    def test_help(self):
        r = self._run("--help")
        assert r.returncode == 0
        assert "base2n" in r.stdout

    def test_list_in_process(self, capsys):
        assert main(["--list"]) == 0
        out = capsys.readouterr().out.split()
        assert "base32-crockford" in out
        assert "base64-url" in out
        assert "base16" not in out
