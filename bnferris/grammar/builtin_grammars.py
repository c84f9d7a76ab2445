"""
Built-in Grammars

Ready-made grammars in the hybrid notation, usable with ``--builtin NAME``.
"""

from typing import Dict


class BuiltinGrammars:
    """Collection of built-in grammar specifications."""

    @staticmethod
    def get_json_grammar() -> str:
        """Get JSON grammar (simplified). Entry: json"""
        return r"""
        ; JSON text, RFC 8259 subset
        json    = value
        value   = object / array / string / number / "true" / "false" / "null"
        object  = "{" [ member *( "," member ) ] "}"
        member  = string ":" value
        array   = "[" [ value *( "," value ) ] "]"
        string  = %x22 *char %x22
        char    = %x20-21 / %x23-5B / %x5D-7E
        char   =/ "\\" escape
        escape  = %x22 / "\\" / "/" / "b" / "f" / "n" / "r" / "t"
        number  = [ "-" ] int [ frac ]
        int     = "0" / %x31-39 *digit
        frac    = "." 1*digit
        digit   = %x30-39
        """

    @staticmethod
    def get_url_grammar() -> str:
        """Get URL grammar. Entry: url"""
        return r"""
        url       = scheme "://" host [ ":" port ] [ path ] [ query ] [ fragment ]
        scheme    = "http" | "https" | "ftp" | "file"
        host      = hostname | ipv4
        hostname  = label *3( "." label )
        label     = letter *7 letter-or-digit
        ipv4      = octet "." octet "." octet "." octet
        octet     = digit / %x31-39 digit / "1" 2digit
                  / "2" %x30-34 digit / "25" %x30-35
        port      = 1*5 digit
        path      = "/" *( segment "/" ) [ segment ]
        segment   = 1*8 letter-or-digit
        query     = "?" param *( "&" param )
        param     = name "=" *8 letter-or-digit
        fragment  = "#" *8 letter-or-digit
        name      = letter *7 letter-or-digit
        letter    = "a" ... "z"
        letter-or-digit = letter | digit | "_" | "-"
        digit     = %x30-39
        """

    @staticmethod
    def get_arithmetic_grammar() -> str:
        """Get arithmetic expression grammar (classic BNF). Entry: expr"""
        return r"""
        <expr>   ::= <term> | <expr> "+" <term> | <expr> "-" <term>
        <term>   ::= <factor> | <term> "*" <factor> | <term> "/" <factor>
        <factor> ::= <number> | "(" <expr> ")"
        <number> ::= <digit> {<digit>}
        <digit>  ::= "0" ... "9"
        """

    @staticmethod
    def get_email_grammar() -> str:
        """Get email address grammar. Entry: email"""
        return r"""
        email  = local "@" domain
        local  = word *( "." word )
        domain = label 1*3( "." label )
        word   = letter *10 letter-or-digit
        label  = letter *10 letter-or-digit
        letter = %x61-7A
        letter-or-digit  = letter / digit / "_"
        letter-or-digit =/ "-"
        digit  = %x30-39
        """

    @staticmethod
    def get_http_grammar() -> str:
        """Get HTTP/1.x request grammar. Entry: request"""
        return r"""
        request        = request-line *( header CRLF ) CRLF
        request-line   = method SP request-target SP "HTTP/1." %x30-31 CRLF
        method         = "GET" / "POST" / "PUT" / "DELETE" / "HEAD" / "OPTIONS"
        request-target = "/" *( segment "/" ) [ segment ] [ "?" query ]
        segment        = 1*8 pchar
        pchar          = %x61-7A / %x30-39 / "-" / "_" / "."
        query          = param *( "&" param )
        param          = 1*8 pchar "=" *8 pchar
        header         = field-name ":" SP field-value
        field-name     = "Host" / "Accept" / "User-Agent" / "X-" 1*8 %x61-7A
        field-value    = 1*16 %x20-7E
        SP             = %x20
        CRLF           = %x0D.0A
        """

    @staticmethod
    def get_grammar(name: str) -> str:
        """
        Get grammar by name.

        Args:
            name: Grammar name (json, url, arithmetic, email, http)

        Returns:
            Grammar text
        """
        grammars = BuiltinGrammars._registry()

        if name.lower() not in grammars:
            raise ValueError(f"Unknown grammar: {name}. Available: {list(grammars.keys())}")

        return grammars[name.lower()]()

    @staticmethod
    def get_entry(name: str) -> str:
        """Default entry rule of a built-in grammar."""
        entries = {
            'json': 'json',
            'url': 'url',
            'arithmetic': 'expr',
            'email': 'email',
            'http': 'request',
        }
        return entries[name.lower()]

    @staticmethod
    def list_grammars() -> list:
        """List available built-in grammars."""
        return list(BuiltinGrammars._registry())

    @staticmethod
    def _registry() -> Dict:
        return {
            'json': BuiltinGrammars.get_json_grammar,
            'url': BuiltinGrammars.get_url_grammar,
            'arithmetic': BuiltinGrammars.get_arithmetic_grammar,
            'email': BuiltinGrammars.get_email_grammar,
            'http': BuiltinGrammars.get_http_grammar,
        }
